from setuptools import setup, find_packages

setup(
    name="linkding-to-markdown",
    version="0.1.0",
    packages=find_packages(include=["linkding_markdown", "linkding_markdown.*"]),
    install_requires=[
        "httpx>=0.25.0",
        "python-dotenv>=1.0.0",
        "pydantic>=2.0.0",
        "Jinja2>=3.1.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.4.0",
            "pytest-asyncio>=0.21.0",
        ],
    },
    description="Выгрузка закладок Linkding в Markdown-документ по шаблону",
    long_description=open("README.md", encoding="utf-8").read(),
    long_description_content_type="text/markdown",
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
    python_requires=">=3.9",
    entry_points={
        "console_scripts": [
            "linkding-to-markdown=linkding_markdown.main:main",
        ],
    },
)
