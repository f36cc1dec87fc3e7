from setuptools import find_packages, setup

setup(
    name="folio-search",
    version="0.1.0",
    description="Catalog search, faceting and autocomplete for an online bookstore.",
    python_requires=">=3.10",
    packages=find_packages(include=["folio", "folio.*"]),
    package_data={"folio": ["folio.toml"]},
    install_requires=[
        "asyncpg>=0.29.0",
        "colorlog>=6.8.0",
        "fastapi>=0.110.0",
        "pydantic>=2.6.0",
        "python-json-logger>=3.1.0",
        "redis>=5.0.1",
        "toml>=0.10.2",
        "uvicorn>=0.27.0",
    ],
    extras_require={
        "test": [
            "httpx>=0.27.0",
            "pytest>=8.0.0",
            "pytest-asyncio>=0.23.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "folio-serve=folio.main.app_entry:main",
        ],
    },
)
