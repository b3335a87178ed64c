from setuptools import setup, find_packages

setup(
    name='sound_cue_detection',
    version='0.1.0',
    description='Turns per-frame sound classifier scores into confirmed detections',
    license='new BSD',
    packages=find_packages(exclude=['tests', 'tests.*']),
    python_requires='>=3.9',
    install_requires=['numpy', 'requests', 'fastapi', 'pydantic', 'uvicorn'],
    tests_require=['pytest', 'httpx'],
    extras_require={'test': ['pytest', 'httpx']},
    entry_points={
        'console_scripts': [
            'sound-cue-monitor=sound_cue_detection.monitor.cli:main',
            'sound-cue-api=sound_cue_detection.monitor.api:main',
        ],
    },
    include_package_data=True,
    zip_safe=False
)
