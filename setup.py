"""
quizmend - repair Multi-Select questions after a D2L to Canvas migration

Installation:
    pip install -e .

This installs the 'quizmend' command in your environment.
"""

from setuptools import setup, find_packages
import os

# Read README for long description
long_description = ''
if os.path.exists('README.md'):
    with open('README.md', 'r', encoding='utf-8') as f:
        long_description = f.read()

setup(
    name='quizmend',
    version='1.0.0',
    description='Repair D2L Multi-Select questions imported into Canvas as single-answer multiple choice',
    long_description=long_description,
    long_description_content_type='text/markdown',
    license='MIT',

    packages=find_packages(exclude=['tests', 'tests.*', '*.tests', '*.tests.*']),

    python_requires='>=3.9',

    install_requires=[
        'click>=8.0',
        'canvasapi>=2.0',
        'PyYAML>=6.0',
        'requests>=2.28',
        'beautifulsoup4>=4.11',
        'lxml>=4.9',
    ],

    extras_require={
        'dev': [
            'pytest>=7.4',
            'pytest-cov>=4.1',
            'pytest-mock>=3.11',
        ],
    },

    # CLI entry point - this creates the 'quizmend' command
    entry_points={
        'console_scripts': [
            'quizmend=quizmend.cli:cli',
        ],
    },

    classifiers=[
        'Development Status :: 4 - Beta',
        'Intended Audience :: Education',
        'License :: OSI Approved :: MIT License',
        'Programming Language :: Python :: 3',
        'Programming Language :: Python :: 3.9',
        'Programming Language :: Python :: 3.10',
        'Programming Language :: Python :: 3.11',
        'Programming Language :: Python :: 3.12',
        'Topic :: Education',
    ],

    keywords='canvas d2l lms quiz migration',
)
