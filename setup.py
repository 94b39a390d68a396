from setuptools import setup, find_namespace_packages

setup(
    name="ha-alarm-clock",
    version="0.1.0",
    packages=find_namespace_packages(include=['custom_components.*']),
    package_data={'custom_components.alarm_clock': ['*.json', '*.yaml', 'translations/*.json']},
    install_requires=[
        'voluptuous',
        'homeassistant',
        'pydub',
    ],
    extras_require={
        'test': [
            'pytest',
            'pytest-asyncio',
            'pytest-homeassistant-custom-component',
        ],
    },
)
