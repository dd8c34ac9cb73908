#!/usr/bin/env python3
"""Setup script for samsung_tv package."""
from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="samsung-tv-control",
    version="0.1.0",
    author="",
    author_email="",
    description="Power and remote control for Samsung (Tizen) Smart TVs, with an MQTT bridge",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Intended Audience :: End Users/Desktop",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Home Automation",
        "Topic :: Software Development :: Libraries :: Python Modules",
    ],
    keywords="samsung tizen tv mqtt smart-tv wake-on-lan home-automation",
    install_requires=[
        "aiohttp>=3.9",
        "paho-mqtt>=2.0",
        "pyyaml>=6.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
            "pytest-asyncio>=0.23",
        ],
    },
    entry_points={
        "console_scripts": [
            "samsung-tv=samsung_tv.cli:main",
            "samsung2mqtt=samsung2mqtt.__main__:main",
        ],
    },
    python_requires=">=3.9",
)
