# setup.py
from setuptools import setup, find_packages

setup(
    name="webqa",
    version="0.1.0",
    description="WebQA: front-end quality analyzer with multi-phase CSS/JS discovery",
    packages=find_packages(exclude=["tests", "tests.*"]),
    package_data={"webqa": ["templates/*.j2"]},
    install_requires=[
        "aiohttp>=3.9",
        "beautifulsoup4",
        "lxml",
        "pydantic>=2",
        "PyYAML",
        "click",
        "Jinja2",
        "cssutils",
        "pyjsparser",
    ],
    extras_require={
        "test": ["pytest", "pytest-asyncio"],
    },
    entry_points={
        "console_scripts": ["webqa=webqa.cli:cli"],
    },
    python_requires=">=3.11",
)
