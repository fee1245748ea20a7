#!/usr/bin/env python3
"""
Setup script for GestureCode
"""
from pathlib import Path

from setuptools import find_packages, setup

here = Path(__file__).parent


def read_requirements():
    """Read core requirements, skipping blanks and comments"""
    lines = (here / "requirements.txt").read_text().splitlines()
    return [line.strip() for line in lines if line.strip() and not line.startswith("#")]


setup(
    name="gesturecode",
    version="0.1.0",
    description="Hand gesture and motion action recognition from webcam hand landmarks",
    python_requires=">=3.9",
    packages=find_packages(include=["gesturecode", "gesturecode.*"]),
    package_data={"gesturecode": ["config.default.yaml"]},
    install_requires=read_requirements(),
    extras_require={
        "camera": ["opencv-python>=4.8", "mediapipe>=0.10"],
        "test": ["pytest>=7"],
    },
    entry_points={
        "console_scripts": [
            "gesturecode=gesturecode.main:run",
        ],
    },
)
