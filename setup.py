#!/usr/bin/env python
"""
Setup script for Sceneware
"""

from setuptools import setup, find_packages

# Read the contents of README file
from pathlib import Path
this_directory = Path(__file__).parent
long_description = (this_directory / "README.md").read_text()

setup(
    name="sceneware",
    version="0.1.0",
    description="Real-time scene narration for blind and low-vision users",
    long_description=long_description,
    long_description_content_type="text/markdown",
    author="Sceneware Team",
    packages=find_packages(include=["sceneware", "sceneware.*"]),
    python_requires=">=3.9",
    install_requires=[
        "pydantic>=2.0.0",
        "rich>=13.0.0",
        "PyYAML>=6.0",
    ],
    extras_require={
        "vision": ["opencv-python>=4.8.0", "numpy>=1.24.0", "ultralytics>=8.0.0"],
        "tts": ["pyttsx3>=2.90"],
        "dev": [
            "pytest>=7.0.0",
            "pytest-asyncio>=0.21.0",
            "pytest-cov>=4.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "sceneware=sceneware.cli:main",
        ],
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: Apache Software License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Multimedia :: Video :: Capture",
        "Topic :: Multimedia :: Sound/Audio :: Speech",
        "Topic :: Scientific/Engineering :: Image Recognition",
    ],
    keywords="accessibility, scene description, object detection, yolo, tts, narration",
)
