from setuptools import setup, find_packages

setup(
    name="proplab",
    version="0.1.0",
    description="Player prop statistics engine: game-log filters, rolling trends, hit rates and market odds",
    packages=find_packages(exclude=("tests", "tests.*")),
    install_requires=[
        "numpy>=1.22.4",
        "pandas>=1.5.3",
        "pytz>=2022.7",
        "scipy>=1.10.0",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    python_requires=">=3.8",
    entry_points={
        "console_scripts": [
            "proplab=proplab.main:main",
        ],
    },
)
