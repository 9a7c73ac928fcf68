"""SMC Trader package setup."""
from setuptools import setup, find_packages

setup(
    name="smc-trader",
    version="1.0.0",
    description="Multi-timeframe SMC/ICT decision engine with trade lifecycle management",
    author="Your Name",
    author_email="your.email@example.com",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    python_requires=">=3.8",
    install_requires=[
        "numpy>=1.24.0",
        "pandas>=2.0.0",
        "PyYAML>=6.0",
        "python-dotenv>=1.0.0",
        "pytz>=2023.3",
        "tabulate>=0.9.0",
    ],
    extras_require={
        "parquet": [
            "pyarrow>=14.0.0",
        ],
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
            "black>=23.0.0",
            "flake8>=6.0.0",
        ]
    },
    entry_points={
        "console_scripts": [
            "smc-trader=smc_trader.bot:main",
        ],
    },
)
