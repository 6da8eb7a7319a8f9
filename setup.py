from setuptools import setup, find_packages

setup(
    name="israeli-bank-ynab",
    version="1.0.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "pandas",
    ],
    extras_require={
        "test": [
            "pytest",
            "pytest-dependency",
        ],
    },
    entry_points={
        "console_scripts": [
            "israeli-bank-ynab=israeli_bank_ynab.cli:main",
        ],
    },
    description="Convert scraped Israeli bank transactions to YNAB CSV and reconcile exports",
    python_requires=">=3.8",
)
