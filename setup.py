# setup.py
from setuptools import setup, find_packages

setup(
    name="route_mapper",
    version="0.1.0",
    description="Асинхронный обход сайта и построение дерева маршрутов RouteMapper",
    packages=find_packages(exclude=("tests", "tests.*")),
    package_data={"route_mapper": ["templates/*.j2"]},
    install_requires=[
        "aiohttp>=3.9",
        "beautifulsoup4>=4.12",
        "click>=8.1",
        "Jinja2>=3.1",
        "pydantic>=2.5",
        "PyYAML>=6.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.4",
            "pytest-asyncio>=0.23",
        ],
    },
    entry_points={
        "console_scripts": ["route-mapper=route_mapper.cli:main"],
    },
    python_requires=">=3.11",
)
