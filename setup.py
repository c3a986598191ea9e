# -*- coding: utf-8 -*-
from setuptools import setup

from lorgnette import VERSION

setup(name="lorgnette",
      version=VERSION,
      description="Drive suspendable computations to a single deferred result",
      packages=['lorgnette',
                'lorgnette.stack',
                'lorgnette.basic_stack',
                'lorgnette.twisted_stack',
                'lorgnette.tornado_stack'],
      python_requires='>=3.8',
      install_requires=[],
      extras_require={
          'twisted': ['twisted'],
          'tornado': ['tornado'],
          'test': ['pytest', 'pytest-timeout', 'twisted', 'tornado'],
      },
      license='MIT'
      )
