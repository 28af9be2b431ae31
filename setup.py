from setuptools import find_packages, setup

exec(open("taskall/_version.py", encoding="utf-8").read())

with open("README.rst", encoding="utf8") as f:
    LONG_DESC = f.read()

setup(
    name="taskall",
    version=__version__,
    description="Fail-fast, order-preserving aggregation of concurrent tasks",
    long_description=LONG_DESC,
    long_description_content_type="text/x-rst",
    license="MIT OR Apache-2.0",
    packages=find_packages(include=["taskall", "taskall.*"]),
    install_requires=[
        # attrs 19.2.0 adds `eq` option to decorators
        "attrs >= 19.2.0",
        "sortedcontainers",
        "outcome",
        "sniffio >= 1.3.0",
    ],
    extras_require={
        "test": ["pytest"],
    },
    python_requires=">=3.8",
    keywords=["async", "tasks", "promise", "all", "concurrency"],
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Framework :: AsyncIO",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "License :: OSI Approved :: Apache Software License",
        "Programming Language :: Python :: Implementation :: CPython",
        "Programming Language :: Python :: Implementation :: PyPy",
        "Programming Language :: Python :: 3 :: Only",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
)
