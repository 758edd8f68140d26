"""Setup script for CDN Cert Sync."""

from setuptools import setup, find_packages

setup(
    name="cdn-cert-sync",
    version="1.0.0",
    description="Watch a TLS certificate pair and upload it to an Alibaba Cloud CDN domain on change",
    long_description=open("README.md", encoding="utf-8").read(),
    long_description_content_type="text/markdown",
    author="CDN Cert Sync contributors",
    python_requires=">=3.10",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "watchdog>=3.0.0",
        "alibabacloud-cdn20180510>=3.0.0",
        "alibabacloud-tea-openapi>=0.3.0",
        "alibabacloud-tea-util>=0.3.0",
        "alibabacloud-tea>=0.3.0",
        "python-dotenv>=1.0.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "cdn-cert-sync=cdn_cert_sync.__main__:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: No Input/Output (Daemon)",
        "Intended Audience :: System Administrators",
        "Operating System :: POSIX :: Linux",
        "Operating System :: MacOS :: MacOS X",
        "Operating System :: Microsoft :: Windows",
        "Programming Language :: Python :: 3",
        "Topic :: Internet :: WWW/HTTP",
        "Topic :: Utilities",
    ],
)
