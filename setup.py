"""
setup.py for the milpmodel Python package
"""
from pathlib import Path
from setuptools import setup


# Read README for long description
readme_path = Path(__file__).parent / 'README.md'
long_description = readme_path.read_text(encoding='utf-8') if readme_path.exists() else ''

setup(
    name='milpmodel',
    version='0.1.0',
    author='milpmodel Contributors',
    description='Algebraic modeling layer for mixed-integer linear programming with LP/MPS output and HiGHS solving',
    long_description=long_description,
    long_description_content_type='text/markdown',
    packages=['milpmodel'],
    package_dir={'milpmodel': 'milpmodel'},
    install_requires=[
        'numpy>=1.20.0',
        'scipy>=1.9.0',
        'highspy>=1.7.0',
    ],
    extras_require={
        'test': [
            'pytest>=7.0',
            'hypothesis>=6.0',
        ],
    },
    python_requires='>=3.8',
    classifiers=[
        'Development Status :: 4 - Beta',
        'Intended Audience :: Science/Research',
        'License :: OSI Approved :: MIT License',
        'Programming Language :: Python :: 3',
        'Programming Language :: Python :: 3.8',
        'Programming Language :: Python :: 3.9',
        'Programming Language :: Python :: 3.10',
        'Programming Language :: Python :: 3.11',
        'Programming Language :: Python :: 3.12',
        'Topic :: Scientific/Engineering :: Mathematics',
    ],
    zip_safe=False,
)
