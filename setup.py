from os import path

from setuptools import setup

this_dir = path.abspath(path.dirname(__file__))
with open(path.join(this_dir, "README.md"), encoding="utf8") as f:
    long_description = f.read()

setup(
    name="sweetshop",
    description="Sweet Shop - inventory and access-control service for a sweet shop",
    long_description=long_description,
    long_description_content_type="text/markdown",
    version="0.1.0",
    license="MIT",
    packages=["sweetshop", "sweetshop.core", "sweetshop.services", "sweetshop.test"],
    package_data={
        "sweetshop": ["py.typed"],
        "sweetshop.core": ["py.typed"],
        "sweetshop.test": ["py.typed"],
    },
    keywords=["sweetshop", "inventory", "sqlalchemy", "fastapi"],
    python_requires=">=3.9",
    install_requires=[
        "fastapi",
        "uvicorn",
        "sqlalchemy>=2.0",
        "pydantic>=2",
        "email-validator",
        "PyJWT>=2",
        "argon2-cffi",
        "colorama>=0.4.6",
    ],
    extras_require={
        "test": [
            "pytest",
            "httpx",
        ],
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Framework :: FastAPI",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3.9",
    ],
    entry_points={
        "console_scripts": [
            "sweetshop = sweetshop.command:console_main",
        ]
    },
)
