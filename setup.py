import setuptools
from setuptools import find_packages

with open("readme.md", "r") as fh:
    long_description = fh.read()


vars2find = ["__author__", "__version__", "__url__"]
vars2readme = {}
with open("./mongo_lifecycle/__init__.py") as f:
    for line in f.readlines():
        for v in vars2find:
            if line.startswith(v):
                line = line.replace(" ", "").replace('"', "").replace("'", "").strip()
                vars2readme[v] = line.split("=")[1]

# Core dependencies (backup engine, scheduler, configuration stores)
core_deps = [
    "pymongo>=4.9",
    "pydantic>=2.0",
    "apscheduler>=3.10,<4",
    "aiofiles",
    "redis[hiredis]>=5.0.1",
]

api_deps = [
    "fastapi",
    "pydantic-settings>=2.0",
    "uvicorn",
]

setuptools.setup(
    name="mongo-lifecycle",
    url=vars2readme["__url__"],
    version=vars2readme["__version__"],
    author=vars2readme["__author__"],
    description="Snapshot, restore, scheduling and retention for MongoDB databases",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
    python_requires=">=3.10",
    install_requires=core_deps,
    extras_require={
        "api": api_deps,
        "test": api_deps + [
            "pytest",
            "pytest-asyncio",
            "httpx",
        ],
    },
)
