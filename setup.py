from setuptools import setup, find_packages

setup(
    name='assetctl',
    version='0.1.0',
    packages=find_packages(exclude=['assetctl.tests', 'assetctl.tests.*']),
    include_package_data=True,
    package_data={
        'assetctl': ['data/*.yaml'],
    },
    install_requires=[
        'typer',
        'requests',
        'python-dotenv',
        'pyyaml',
        'pydantic>=2',
        'jsonschema',
        'packaging>=22',
    ],
    extras_require={
        'test': [
            'pytest',
        ],
    },
    entry_points={
        'console_scripts': [
            'assetctl=assetctl.cli:app',
            'assetctl-nodeup=assetctl.modules.nodeup.__main__:main',
        ]
    },
    author='Your Name',
    description='Version resolution and verified boot-time fetching of Kubernetes node binaries',
    classifiers=[
        'Programming Language :: Python :: 3',
        'Operating System :: OS Independent',
    ],
    python_requires='>=3.8',
)
