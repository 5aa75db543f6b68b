from setuptools import find_packages, setup
from glob import glob
import os

package_name = 'auto_navigator'

setup(
    name=package_name,
    version='0.1.0',
    packages=find_packages(exclude=['test']),
    data_files=[
        (os.path.join('share', package_name, 'config'), glob('config/*.yaml')),
    ],
    python_requires='>=3.9',
    install_requires=[
        'setuptools',
        'numpy',
        'PyYAML',
    ],
    extras_require={
        'test': ['pytest', 'hypothesis'],
    },
    zip_safe=True,
    maintainer='AutoNavigator Developer',
    maintainer_email='developer@autonav.local',
    description='Local-motion planning and exploration coverage core for autonomous 2D navigation',
    license='Apache-2.0',
    entry_points={
        'console_scripts': [
            'run_exploration = auto_navigator.scripts.run_exploration:main',
        ],
    },
)
