import setuptools

with open('README.md', 'rt') as f:
    long_description = f.read()

setuptools.setup(
    name='halffp',
    version='0.1.0',
    description='IEEE 754 binary16 numbers with exact bit-level semantics',
    long_description=long_description,
    long_description_content_type='text/markdown',
    license='MIT',
    python_requires='>=3.8',
    install_requires=['numpy>=1.23.0', 'gmpy2>=2.1.2'],
    extras_require={
        'test': ['pytest>=7.0'],
    },
    packages=['halffp', 'halffp.binary16', 'halffp.arithmetic'],
    classifiers=[
        'Development Status :: 3 - Alpha',
        'Operating System :: POSIX :: Linux',
        'License :: OSI Approved :: MIT License',
    ],
)
