from setuptools import setup, find_packages

setup(
    name="contentscale",
    version="1.0.0",
    packages=find_packages(include=["contentscale", "contentscale.*"]),
    python_requires=">=3.11",
    install_requires=[
        "fastapi>=0.110",
        "starlette>=0.37",
        "pydantic>=2.5",
        "pydantic-settings>=2.3",
        "uvicorn[standard]>=0.29",
    ],
    extras_require={
        "test": [
            "pytest>=8.0",
            "pytest-asyncio>=0.23",
            "httpx>=0.27",
        ],
    },
)
