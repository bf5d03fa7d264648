"""*********************************************************************************************************************
*                                                                                                                      *
*                                                                                                                      *
*                                                                                                                      *
*                                                                                                                      *
* -------------------------------------------------------------------------------------------------------------------- *
*                                                                                                                      *
*    METADATA:                                                                                                         *
*                                                                                                                      *
*        File:    setup.py                                                                                             *
*        Project: hdrprep                                                                                              *
*        Version: 0.1.0                                                                                                *
*        Created: 2026-10-18                                                                                           *
*        Author:  Jess Mann                                                                                            *
*        Email:   jess.a.mann@gmail.com                                                                                *
*        Copyright (c) 2026 Jess Mann                                                                                  *
*                                                                                                                      *
* -------------------------------------------------------------------------------------------------------------------- *
*                                                                                                                      *
*    LAST MODIFIED:                                                                                                    *
*                                                                                                                      *
*        2026-10-18     By Jess Mann                                                                                   *
*                                                                                                                      *
*********************************************************************************************************************"""
from setuptools import setup, find_packages

setup(
    name='hdrprep',
    version='0.1.0',
    packages=find_packages(include=['hdrprep', 'hdrprep.*']),
    long_description=open("README.md").read(),
    long_description_content_type="text/markdown",
    author="Jess Mann",
    python_requires=">=3.10",
    install_requires=[
        'numpy',
        'opencv-python',
        'imageio',
        'tifffile',
        'rawpy',
        'exifread',
        'colorlog',
        'pydantic',
        'tqdm',
        'python-dotenv',
    ],
    extras_require={
        'test': ['pytest'],
    },
    entry_points={
        'console_scripts': [
            'hdrprep=hdrprep.workflows.hdr:main',
        ],
    },
)
