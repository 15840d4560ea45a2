import re

import setuptools

# Read the version without importing the package (its dependencies may not be installed yet)
with open("pygrowatt/__init__.py", "r") as fh:
    __version__ = '%s.%s.%s' % re.search(r"version_tuple = \((\d+), (\d+), (\d+)\)", fh.read()).groups()

with open("README.md", "r") as fh:
    long_description = fh.read()

setuptools.setup(
    name="pygrowatt",
    version=__version__,
    author="pyGrowatt contributors",
    description="Python module to acquire live telemetry from the Growatt solar monitoring platform",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=setuptools.find_packages(),
    python_requires='>=3.9',
    install_requires=[
        'requests',
        'python-dotenv',
        'beautifulsoup4',
        'python-dateutil',
        'growattServer<2.2',
    ],
    extras_require={
        'test': ['pytest'],
    },
    entry_points={
        'console_scripts': ['pygrowatt=pygrowatt.__main__:main'],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
)
