#!/usr/bin/env python

import os
from glob import glob
from setuptools import setup


def read(fname):
    with open(os.path.join(os.path.dirname(__file__), fname)) as f:
        return f.read()


setup(
  name='newts-sizing',
  version='1.0.3',
  url='https://github.com/agalue/newts-sizing',
  license='Apache Software License 2.0',
  description='Estimate the size of a Cassandra/ScyllaDB cluster for Newts',
  long_description=read('README.md'),
  long_description_content_type='text/markdown',
  py_modules=['newts_sizing'],
  scripts=glob('bin/*'),
  install_requires=['configobj'],
  python_requires='>=3.7',
  classifiers=[
    'Programming Language :: Python :: 3',
    'Programming Language :: Python :: Implementation :: CPython',
    'Programming Language :: Python :: Implementation :: PyPy',
  ],
  zip_safe=False
)
