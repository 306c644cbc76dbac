# setup.py
from setuptools import setup, find_packages

setup(
    name="spend-tracker",
    version="0.1.0",
    description="Parse credit-card statements into one net-spending dataset with credits, overrides and merchant search",
    author="Your Name",
    author_email="you@example.com",
    url="https://github.com/yourusername/spend-tracker",
    packages=find_packages(include=["spend_tracker", "spend_tracker.*"]),
    python_requires=">=3.8",
    install_requires=[
        "click>=7.0",
        "pyyaml>=5.3",
        "pandas>=1.1",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": [
            "spend-tracker=spend_tracker.cli:main",
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
    ],
)
