from setuptools import find_packages, setup

setup(
    name="webwatcher",
    version="0.1.0",
    description="Audit trail of the files a browser writes to its own profile directory",
    author="Araray Velho",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.8",
    install_requires=[
        "click",
        "toml",
        "rich",
        "psutil",
        "watchdog>=3.0"
    ],
    extras_require={
        "test": [
            "pytest"
        ]
    },
    entry_points={
        "console_scripts": [
            "webwatcher=webwatcher.cli:main"
        ]
    },
)
