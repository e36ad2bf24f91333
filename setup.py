"""Setup script for Batch Transfer."""

from setuptools import setup, find_packages

setup(
    name="batch-transfer",
    version="1.0.0",
    description="Configuration-driven batch file copy/move with per-file failure reporting",
    long_description=open("README.md", encoding="utf-8").read(),
    long_description_content_type="text/markdown",
    author="Batch Transfer maintainers",
    python_requires=">=3.11",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[],
    extras_require={
        "windows": [
            "pywin32>=306",
            "accessible_output2>=0.17",
        ],
        "test": [
            "pytest>=7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "batch-transfer=batch_transfer.__main__:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Intended Audience :: System Administrators",
        "Operating System :: MacOS :: MacOS X",
        "Operating System :: Microsoft :: Windows",
        "Operating System :: POSIX :: Linux",
        "Programming Language :: Python :: 3",
        "Topic :: System :: Archiving",
        "Topic :: Utilities",
    ],
)
