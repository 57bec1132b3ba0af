from setuptools import setup, find_packages

if __name__ == '__main__':
    setup(
        name='geoLineScan',
        version='1.0.0',
        author='Saif Aati',
        author_email='saif@caltech.edu, saifaati@gmail.com',
        description='Pushbroom line-scan and frame camera models: pixel to ray',
        platforms=['unix', 'linux', 'win64', 'osx'],
        classifiers=[
            'Programming Language :: Python :: 3.8',
        ],
        license='GNU General Public License v3 (GPLv3)',
        packages=find_packages(include=['geoLineScan', 'geoLineScan.*']),
        python_requires='>=3.8',
        zip_safe=False,
        install_requires=[
            'numpy',
            'scipy',
            'pyyaml',
            'click',
        ],
        extras_require={
            'testing': [
                'pytest>=6.0',
                'pytest-cov>=2.0',
                'mypy>=0.910',
                'flake8>=3.9',
                'tox>=3.24',
            ],
        },
        package_data={
            'geoLineScan': ['geoCore/geoLineScanBaseCfg/*.yaml'],
        },
        entry_points={
            'console_scripts': [
                'geolinescan=geoLineScan.geoLineScan_CLI.pixel2ray_cli:cli',
            ],
        },
    )
