from setuptools import setup, find_packages

setup(
    name="tiny-lpt",
    version="0.1.0",
    description="Low precision transformations for quantized compute graphs",
    author="Your Name",
    author_email="your.email@example.com",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    install_requires=[
        "numpy>=1.24.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.3.0",
            "torch>=2.0.0",
        ],
    },
    python_requires=">=3.8",
)
