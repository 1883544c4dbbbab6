from setuptools import setup, find_packages

setup(
    name='descent-hog',
    version='0.1.0',
    description='Read Descent .HOG archives, .RDL level geometry and .TXB text',
    long_description=open('README.md').read(),
    long_description_content_type='text/markdown',
    packages=find_packages(include=['descent', 'descent.*']),
    install_requires=[
        'numpy>=1.20.0',
        'trimesh>=3.10.0',
    ],
    extras_require={
        'dev': [
            'pytest>=7.0.0',
            'pytest-cov>=4.0.0',
        ],
    },
    entry_points={
        'console_scripts': [
            'descent-hog=descent.cli:main',
        ],
    },
    classifiers=[
        'Development Status :: 4 - Beta',
        'Intended Audience :: Developers',
        'Programming Language :: Python :: 3',
        'Programming Language :: Python :: 3.8',
        'Programming Language :: Python :: 3.9',
        'Programming Language :: Python :: 3.10',
        'Programming Language :: Python :: 3.11',
        'Operating System :: OS Independent',
        'Topic :: Games/Entertainment',
        'Topic :: Multimedia :: Graphics :: 3D Modeling',
    ],
    python_requires='>=3.8',
    include_package_data=True,
    package_data={
        'descent': ['py.typed'],
    },
)
