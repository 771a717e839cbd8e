from setuptools import setup, find_packages

setup(
    name="amcfg",
    version="0.1.0",
    description="Builds typed prometheus alertmanager client configurations from YAML or a single address",
    author="Thomas Nyambati",
    author_email="thomasnyambati@gmail.com",
    packages=["amcfg"],
    install_requires=[
        "pyyaml>=6.0.2",
        "rich>=13.5.0",
    ],
    extras_require={
        "test": ["pytest>=7.0.0"],
    },
    entry_points={
        "console_scripts": [
            "amcfg=amcfg.cli:main",
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
    python_requires=">=3.8",
)
