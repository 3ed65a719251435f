"""
Setup configuration for rabbithole.

Hotkey-driven research windows for X11 desktops.
"""

from setuptools import setup, find_packages
from pathlib import Path

# Read long description from README if it exists
readme_file = Path(__file__).parent / "README.md"
long_description = readme_file.read_text() if readme_file.exists() else ""

setup(
    name="rabbithole",
    version="0.2.0",
    description="Search the selected text in a docked browser window and close it with a hotkey",
    long_description=long_description,
    long_description_content_type="text/markdown",
    author="rabbithole contributors",
    author_email="",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "click>=8.0",
        "rich>=13.0",
        "pydantic>=2.0",
    ],
    python_requires=">=3.9",
    entry_points={
        "console_scripts": [
            "rabbithole=rabbithole.__main__:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: X11 Applications",
        "Intended Audience :: End Users/Desktop",
        "License :: OSI Approved :: MIT License",
        "Operating System :: POSIX :: Linux",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Programming Language :: Python :: 3.13",
    ],
    extras_require={
        "test": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
        ],
    },
)
