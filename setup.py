from setuptools import setup, find_packages

setup(
    name="spendboard",
    version="0.1.0",
    description="SaaS Cost Console - cost and usage across infrastructure, AI and payment providers",
    packages=find_packages(exclude=["tests", "tests.*", "scripts"]),
    install_requires=[
        "httpx>=0.26.0",
        "fastapi>=0.109.0",
        "uvicorn>=0.27.0",
        "pydantic>=2.5.0",
        "typer>=0.9.0",
        "rich>=13.7.0",
        "python-dotenv>=1.0.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.4.0",
            "pytest-asyncio>=0.23.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "spendboard=spendboard.cli:app",
        ],
    },
    python_requires=">=3.11",
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
)
