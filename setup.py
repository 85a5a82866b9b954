# setup.py
from setuptools import setup, find_namespace_packages

setup(
    name="selfupdate",
    version="1.0.0",
    description="In-place self-update of executables from a versioned artifact store",
    python_requires=">=3.9",
    package_dir={"": "src"},
    packages=find_namespace_packages(where="src", include=["selfupdate", "selfupdate.*"]),
    install_requires=[
        "requests",
    ],
    extras_require={
        "test": [
            "pytest",
        ],
    },
    entry_points={
        'console_scripts': [
            'selfupdate=selfupdate.interface.cli.app:main',
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
    ],
)
