from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

with open("requirements.txt", "r", encoding="utf-8") as f:
    requirements = [line.strip() for line in f if line.strip() and not line.startswith("#")]

setup(
    name="btreetrace",
    version="1.0.0",
    description="Step-recording B-Tree insertion engine with replayable snapshots",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["btreetrace", "btreetrace.*", "shell"]),
    py_modules=["btreetrace_server"],
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Intended Audience :: Education",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Education",
    ],
    python_requires=">=3.9",
    install_requires=requirements,
    extras_require={
        "test": ["pytest>=7.0", "httpx>=0.24"],
    },
    entry_points={
        "console_scripts": [
            "btreetrace=shell.trace_shell:main",
            "btreetrace-server=btreetrace_server:main",
        ],
    },
    include_package_data=True,
)
