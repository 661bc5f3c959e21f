#!/usr/bin/env python3

from setuptools import setup, find_packages
import os

# Read version from __init__.py
def get_version():
    version_file = os.path.join(os.path.dirname(__file__), 'netprov', '__init__.py')
    with open(version_file) as f:
        for line in f:
            if line.startswith('__version__'):
                return line.split('=')[1].strip().strip('"\'')
    return '0.1.0'

setup(
    name="netprov",
    version=get_version(),
    description="Provisioning responder for a dedicated network segment",
    long_description="DHCP, DNS and HTTP responders that bring up devices on an isolated link",
    author="netprov developers",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "flask>=2.0.0",
        "requests>=2.25.0",
        "dnspython>=2.1.0",
        "scapy>=2.4.0",
        "netifaces>=0.11.0",
        "pyyaml>=5.4.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
            "hypothesis>=6.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "netprov=netprov.cli.main:main",
        ],
    },
    python_requires=">=3.8",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: System Administrators",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Topic :: System :: Networking",
    ],
)
