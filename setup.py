from setuptools import find_packages, setup

package_name = "quadric_slam"

setup(
    name=package_name,
    version="0.1.0",
    packages=find_packages(exclude=["test"]),
    python_requires=">=3.9",
    install_requires=["setuptools", "numpy", "scipy", "pyyaml"],
    extras_require={"test": ["pytest"]},
    zip_safe=True,
    maintainer="you",
    maintainer_email="you@example.com",
    description="Constrained dual quadric landmarks for factor-graph SLAM",
    license="Apache-2.0",
)
