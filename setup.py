from setuptools import setup, find_packages

# Read the README file for a long description.
with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

# Read core requirements from requirements.txt
with open('requirements.txt') as f:
    install_requires = [line for line in f.read().splitlines() if line and not line.startswith('#')]

# Define development dependencies
extras_require = {
    'dev': [
        'pytest>=6.0',
        'flake8',
        'black',
        'mypy',
        'setuptools',
        'wheel',
    ],
    'test': [
        'pytest>=6.0',
    ],
}

setup(
    name="baofit",
    version="0.1.0",
    description="Binned chi-square fits of the BAO scale in 3D Lyman-alpha forest cross-correlations.",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    classifiers=[
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Operating System :: OS Independent",
        "Intended Audience :: Science/Research",
        "Topic :: Scientific/Engineering :: Astronomy",
        "Topic :: Scientific/Engineering :: Physics",
    ],
    python_requires=">=3.9",
    install_requires=install_requires,
    extras_require=extras_require,
    include_package_data=True,
    entry_points={
        'console_scripts': [
            'baofit=baofit.cli:main',
        ],
    },
)
