from setuptools import setup, find_packages

setup(
    name='heightpan',
    version='0.1.0',
    description='Fetch an elevation tile and pan/zoom a sampling window over it',
    packages=find_packages(exclude=['examples']),
    python_requires='>=3.8',
    install_requires=[
        'numpy',
    ],
    extras_require={
        'remote': ['requests'],
        'viewer': ['matplotlib'],
        'xarray': ['xarray'],
        'all': ['requests', 'matplotlib', 'xarray'],
        'tests': ['pytest', 'requests', 'matplotlib', 'xarray'],
    },
)
