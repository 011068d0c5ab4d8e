"""Setup configuration for the Operations Dashboard Engine package."""

from setuptools import setup, find_packages

setup(
    name="ops-dashboard-engine",
    version="1.0.0",
    description="Metrics aggregation and record filtering for operations dashboards",
    author="Alex",
    author_email="",
    packages=find_packages(include=["src", "src.*", "config", "config.*"]),
    package_data={"config": ["*.yaml"]},
    include_package_data=True,
    python_requires=">=3.11",
    install_requires=[
        "pandas>=2.1.0",
        "numpy>=1.26.0",
        "openpyxl>=3.1.0",
        "python-dotenv>=1.0.0",
        "pyyaml>=6.0",
    ],
    extras_require={
        "dev": [
            "pytest>=8.0.0",
            "pytest-cov>=4.1.0",
            "black>=24.1.0",
            "ruff>=0.2.0",
        ],
    },
)
