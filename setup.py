from setuptools import setup, find_packages

setup(
    name="imgcrawler",
    version="0.1.0",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    python_requires=">=3.11",
    install_requires=[
        "aiohttp>=3.9",
        "beautifulsoup4>=4.12",
        "redis>=5.0.1",
        "pydantic>=2.0.0",
    ],
    extras_require={
        "test": [
            "pytest",
            "pytest-asyncio",
            "fakeredis>=2.20",
        ],
    },
    entry_points={
        "console_scripts": [
            "imgcrawler=imgcrawler.__main__:main",
        ],
    },
)
