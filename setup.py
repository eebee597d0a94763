import setuptools

with open("README.md", "r") as fh:
    long_description = fh.read()

setuptools.setup(
    name="munge",
    version="0.0.1",
    description="Reader and writer for the munge node format of level files",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=setuptools.find_packages(include=['munge', 'munge.*']),
    install_requires=[
        'bitstring',
        'numpy',
        'pillow',
        'PyYAML',
    ],
    extras_require={
        'test': [
            'pytest',
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
    ],
)
