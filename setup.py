from setuptools import setup, find_packages

setup(
    name="davcloud",
    version="0.1.0",
    packages=find_packages(exclude=["davcloud.tests"]),
    install_requires=[
        "requests>=2.25.0",
        "click>=8.0.0",
        "tqdm>=4.0.0",
        "colorama>=0.4.0",
        "python-dotenv>=0.19.0",
    ],
    entry_points={
        'console_scripts': [
            'davcloud=davcloud.cli:main',
        ],
    },
    description="WebDAV and sharing API client for ownCloud and Nextcloud servers",
    long_description=open("README.md").read(),
    long_description_content_type="text/markdown",
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    python_requires=">=3.8",
    extras_require={
        'dev': [
            'pytest>=7.0.0',
            'pytest-cov>=2.0.0',
            'webdavclient3>=3.14.0',
        ],
    },
)
