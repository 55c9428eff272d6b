from setuptools import setup, find_packages

setup(
    name="autobettor",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "requests>=2.31.0",
        "python-dotenv>=1.0.0",
        "aiohttp>=3.9.0",
        "click>=8.1.0",
        "rich>=13.0.0",
        "schedule>=1.2.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.4.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "autobettor=autobettor.cli:main",
        ],
    },
    python_requires=">=3.10",
)
