from setuptools import setup, find_packages

setup(
    name="servicenow-mcp",
    version="1.0.0",
    description="MCP server exposing the ServiceNow Table API and related admin APIs as tools",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    py_modules=["config", "main"],
    python_requires=">=3.9",
    install_requires=[
        "mcp>=1.2.0,<2",
        "python-dotenv>=1.0.0",
        "httpx>=0.25.1",
        "pydantic>=2.4.2",
        "pydantic-settings>=2.0.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-asyncio>=0.21.0",
            "pytest-cov>=4.1.0",
            "black>=23.0.0",
            "isort>=5.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "servicenow-mcp=main:main",
        ],
    },
)
