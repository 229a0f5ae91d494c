from setuptools import setup, find_packages

setup(
    name="xparse-ignore",
    version="0.1.0",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    install_requires=[],
    extras_require={
        "test": [
            "pytest>=7.2.1",
        ],
    },
    entry_points={
        "console_scripts": [
            "xparse-ignore=xparse_ignore.cli:main",
        ],
    },
    python_requires=">=3.8",
    description="List or back up the paths of a directory tree not ignored by its .gitignore files",
    long_description=open("README.md").read(),
    long_description_content_type="text/markdown",
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
)
