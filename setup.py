from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="sivafs",
    version="0.1.0",
    author="Tim Hosking",
    author_email="github.com/Munger",
    description="A filesystem view over append-only siva archives for Python",
    long_description=long_description,
    long_description_content_type="text/markdown",
    url="https://github.com/Munger/sivafs",
    project_urls={
        "Bug Tracker": "https://github.com/Munger/sivafs/issues",
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Topic :: System :: Filesystems",
        "Topic :: System :: Archiving",
    ],
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    python_requires=">=3.8",
    install_requires=[],
    extras_require={
        "test": ["pytest"],
    },
)
