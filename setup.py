from setuptools import setup, find_packages

setup(
    name="azdo-tools",
    version="0.1.0",
    description="MCP tools for Azure DevOps repositories, pull requests and work items",
    author="MCP Team",
    packages=find_packages(),
    install_requires=[
        "pydantic>=2.0.0",
        "aiohttp>=3.8.0",
        "mcp>=1.2.0,<2",
        "anyio>=4.0.0",
        "click>=8.0.0",
        "starlette>=0.27.0",
        "uvicorn>=0.23.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-asyncio>=0.21.0",
            "black>=22.0.0",
            "isort>=5.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "azdo-tools-server=server.main:main",
        ],
    },
    python_requires=">=3.9",
)
