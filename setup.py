from setuptools import find_packages, setup

package_name = "axbycz_calib"

setup(
    name=package_name,
    version="0.0.1",
    packages=find_packages(exclude=["test"]),
    data_files=[
        (
            "share/" + package_name + "/config",
            [
                "config/axbycz_base.yaml",
            ],
        ),
        (
            "share/" + package_name + "/config/presets",
            [
                "config/presets/prob1.yaml",
                "config/presets/prob2.yaml",
            ],
        ),
    ],
    python_requires=">=3.10",
    install_requires=["setuptools", "numpy", "scipy", "pyyaml", "pydantic>=2"],
    extras_require={"test": ["pytest"]},
    zip_safe=True,
    maintainer="you",
    maintainer_email="you@example.com",
    description="Probabilistic AXB = YCZ multi-robot hand-eye calibration on SE(3)",
    license="Apache-2.0",
    tests_require=["pytest"],
)
