import setuptools

with open("README.md", "r") as fh:
    long_description = fh.read()

setuptools.setup(
    name="metastruct",
    version="0.0.1",
    author="Gianluca Pacchiella",
    author_email="gp@ktln2.org",
    description="Metadata extraction from EPS, TIFF and WAV files",
    long_description=long_description,
    long_description_content_type="text/markdown",
    url="https://github.com/gipi/abstruct",
    packages=setuptools.find_packages(exclude=['tests', 'tests.*']),
    install_requires=[
        'bitstring',
        'pillow',
    ],
    extras_require={
        'test': [
            'pytest',
        ],
    },
    scripts=[
        'scripts/dumpmeta.py',
        'scripts/epspreview.py',
    ],
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: GPLv2 License",
        "Operating System :: OS Independent",
    ],
)
