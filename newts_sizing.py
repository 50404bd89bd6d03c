# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#   http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
#
#
# Helpers to size a Cassandra/ScyllaDB cluster for Newts
#
# The analysis half emulates the Evaluation Layer by walking an RRD/JRB
# directory. It works best when storeByGroup is enabled; otherwise only
# limited results are available. Queued data that has not been persisted
# yet will not be reflected in the statistics.
#
# The sizing half applies the capacity formula:
#
#   samplesPerMetric = ttl * 86400 / (interval * 60)
#   availableBytesPerNode = diskSpace * 2^30 * (1 - overhead / 100)
#   nodes = ceil(totalMetrics * samplesPerMetric * sampleSize * RF / availableBytesPerNode)

import argparse
import json
import logging
import math
import os
import stat
import sys
import threading
import time
from collections import namedtuple
from datetime import datetime
from functools import partial
from multiprocessing import Pool

from configobj import ConfigObj, ConfigObjError

__version__ = '1.0.3'

DS_PROPERTIES = 'ds.properties'
STRINGS_PROPERTIES = 'strings.properties'
RRD_EXTENSIONS = ('.rrd', '.jrb')

DEFAULT_RRD_DIR = '/opt/opennms/share/rrd'
DEFAULT_NEWER_THAN = 48
DEFAULT_TTL = 365
DEFAULT_INTERVAL = 5
DEFAULT_SAMPLE_SIZE = 18
DEFAULT_REPLICATION_FACTOR = 2
DEFAULT_OVERHEAD = 15

# Number of paths handed to each pool worker at a time
CHUNK_SIZE = 100

GIGABYTE = 2 ** 30
SECONDS_PER_DAY = 86400

DIGITS = frozenset('0123456789')
ADDRESS_CHARS = DIGITS | frozenset('.')

ByteUnits = (
  ('E', 2 ** 60),
  ('P', 2 ** 50),
  ('T', 2 ** 40),
  ('G', 2 ** 30),
  ('M', 2 ** 20),
  ('K', 2 ** 10),
  ('B', 1),
)

log = logging.getLogger('newts_sizing')


class SizingException(Exception):

  """Base class for newts-sizing exceptions."""


class InvalidDirectory(SizingException):

  """The RRD/JRB directory cannot be analyzed."""


class InvalidSizingParameters(SizingException):

  """Sizing parameters are missing or contradict each other."""


class InvalidConfiguration(SizingException):

  """The configuration file cannot be used."""


FileStats = namedtuple('FileStats', [
  'size', 'groups', 'numericMetrics', 'stringMetrics',
  'resource', 'node', 'interface',
])
FileStats.__new__.__defaults__ = (0, 0, 0, 0, None, None, None)

SizingParameters = namedtuple('SizingParameters', [
  'diskSpace', 'totalMetrics', 'injectionRate', 'ttl', 'interval',
  'sampleSize', 'replicationFactor', 'overhead',
])
SizingParameters.__new__.__defaults__ = (
  0, 0, DEFAULT_TTL, DEFAULT_INTERVAL, DEFAULT_SAMPLE_SIZE,
  DEFAULT_REPLICATION_FACTOR, DEFAULT_OVERHEAD,
)

SizingResult = namedtuple('SizingResult', [
  'samplesPerMetric', 'totalMetrics', 'injectionRate', 'availableBytesPerNode',
  'sampleCapacity', 'clusterUsableBytes', 'rawNodes', 'nodes',
  'replicationFactorIsMinimum', 'calculatedCapacity', 'dailyGrowthPerNode',
])


def byteSize(num):
  """Returns a human readable size using binary units, e.g. 1.5M"""
  for unit, multiple in ByteUnits:
    if num >= multiple:
      value = '%.1f' % (float(num) / multiple)
      if value.endswith('.0'):
        value = value[:-2]
      return value + unit
  return '0B'


def parseProperties(path):
  """Parses a Java properties file into an ordered dict

  Only lines with exactly one '=' are kept, everything else (comments
  included) is dropped silently. A missing or unreadable file yields an
  empty dict.
  """
  properties = {}
  try:
    # Java writes properties files as ISO-8859-1
    with open(path, 'r', encoding='iso-8859-1') as fh:
      for line in fh:
        line = line.rstrip('\n')
        if line.count('=') != 1:
          continue
        (key, value) = line.split('=', 1)
        properties[key] = value
  except (IOError, OSError) as exc:
    log.debug('Unable to read %s: %s' % (path, exc))
  return properties


def isRoundRobinFile(path):
  return path.endswith(RRD_EXTENSIONS)


def resourceName(path):
  """Base name of an RRD/JRB file without its extension"""
  name = os.path.basename(path)
  for extension in RRD_EXTENSIONS:
    if name.endswith(extension):
      return name[:-len(extension)]
  return name


def _isNumber(text):
  return bool(text) and DIGITS.issuperset(text)


def _isAddress(text):
  return bool(text) and ADDRESS_CHARS.issuperset(text)


def _directories(path):
  """Path segments excluding the final (file) segment"""
  return path.split(os.sep)[:-1]


def nodeIdentifier(path):
  """Returns the node directory of a Collectd file, or None

  Both snmp/<nodeId>/ and snmp/fs/<foreignSource>/<foreignId>/ are
  recognized, so it works regardless of storeByForeignSource.
  """
  segments = _directories(path)
  for i, segment in enumerate(segments):
    if segment != 'snmp':
      continue
    rest = segments[i + 1:]
    if rest and _isNumber(rest[0]):
      return rest[0]
    if len(rest) >= 3 and rest[0] == 'fs' and rest[1] and rest[2]:
      return '/'.join(rest[:3])
  return None


def interfaceAddress(path):
  """Returns the IP address of a Pollerd response time file, or None"""
  segments = _directories(path)
  for i, segment in enumerate(segments):
    if segment != 'response':
      continue
    if i + 1 < len(segments) and _isAddress(segments[i + 1]):
      return segments[i + 1]
  return None


def countNumericMetrics(path, singleMetric=False, log=log):
  """Number of numeric metrics stored on a given RRD/JRB file

  With storeByGroup, ds.properties on the same directory maps every data
  source to the group (file) holding it.
  """
  if singleMetric:
    log.debug('Assuming single metric per RRD/JRB files for %s' % path)
    return 1
  resource = resourceName(path)
  dsFile = os.path.join(os.path.dirname(path), DS_PROPERTIES)
  count = sum(1 for value in parseProperties(dsFile).values() if value == resource)
  log.debug('There are %d numeric metrics for %s on %s' % (count, resource, dsFile))
  return count


def countStringMetrics(path, log=log):
  """Number of string attributes on a strings.properties file"""
  count = len(parseProperties(path))
  log.debug('There are %d string attributes on %s' % (count, path))
  return count


def visitFile(path, startTime, singleMetric=False, log=log):
  """Classifies a single file and returns its FileStats

  Returns None when the file is irrelevant, too old, or cannot be
  stat'ed.
  """
  try:
    st = os.stat(path)
  except OSError as exc:
    log.debug('Skipping %s: %s' % (path, exc))
    return None

  if not stat.S_ISREG(st.st_mode) or not st.st_mtime > startTime:
    return None

  if isRoundRobinFile(path):
    return FileStats(
      size=st.st_size,
      groups=0 if singleMetric else 1,
      numericMetrics=countNumericMetrics(path, singleMetric, log),
      resource=os.path.basename(path),
      node=nodeIdentifier(path),
      interface=interfaceAddress(path),
    )

  if os.path.basename(path) == STRINGS_PROPERTIES:
    return FileStats(stringMetrics=countStringMetrics(path, log))

  return None


class Statistics(object):
  """Accumulates the results of an analysis

  Every update holds the instance lock, so a single instance can be fed
  from several threads.
  """

  def __init__(self):
    self.groups = 0
    self.numericMetrics = 0
    self.stringMetrics = 0
    self.totalSize = 0
    self.nodes = {}
    self.interfaces = {}
    self.resources = {}
    self._lock = threading.Lock()

  def incGroups(self, count=1):
    with self._lock:
      self.groups += count

  def addNumeric(self, count):
    with self._lock:
      self.numericMetrics += count

  def addString(self, count):
    with self._lock:
      self.stringMetrics += count

  def addSize(self, size):
    with self._lock:
      self.totalSize += size

  def _increment(self, mapping, key):
    with self._lock:
      mapping[key] = mapping.get(key, 0) + 1

  def addNode(self, node):
    self._increment(self.nodes, node)

  def addInterface(self, address):
    self._increment(self.interfaces, address)

  def addResource(self, resource):
    self._increment(self.resources, resource)

  def record(self, fileStats):
    if fileStats.groups:
      self.incGroups(fileStats.groups)
    if fileStats.size:
      self.addSize(fileStats.size)
    if fileStats.numericMetrics:
      self.addNumeric(fileStats.numericMetrics)
    if fileStats.stringMetrics:
      self.addString(fileStats.stringMetrics)
    if fileStats.resource is not None:
      self.addResource(fileStats.resource)
    if fileStats.node is not None:
      self.addNode(fileStats.node)
    if fileStats.interface is not None:
      self.addInterface(fileStats.interface)

  def asDict(self):
    with self._lock:
      return {
        'nodes': len(self.nodes),
        'interfaces': len(self.interfaces),
        'resources': len(self.resources),
        'groups': self.groups,
        'stringMetrics': self.stringMetrics,
        'numericMetrics': self.numericMetrics,
        'totalSize': self.totalSize,
        'nodeMap': dict(self.nodes),
        'interfaceMap': dict(self.interfaces),
        'resourceMap': dict(self.resources),
      }


class Analyzer(object):

  def __init__(self, rrdDir=DEFAULT_RRD_DIR, newerThan=DEFAULT_NEWER_THAN,
               singleMetric=False, jobs=1, log=log, now=None):
    """rrdDir is the RRD/JRB directory to walk
    newerThan is the number of hours a file must have been updated within
    singleMetric tells the analyzer storeByGroup is disabled
    jobs is the number of worker processes, 1 walks sequentially
    """
    self.rrdDir = rrdDir
    self.newerThan = newerThan
    self.singleMetric = singleMetric
    self.jobs = jobs
    self.log = log
    if now is None:
      now = time.time()
    self.startTime = now - newerThan * 3600

  def _walkError(self, exc):
    self.log.debug('Skipping %s: %s' % (getattr(exc, 'filename', None), exc))

  def files(self):
    """Yields every file under rrdDir, following symbolic links

    A directory reachable through several links is only entered once.
    """
    seen = set()
    for dirpath, dirnames, filenames in os.walk(self.rrdDir, onerror=self._walkError,
                                                followlinks=True):
      realpath = os.path.realpath(dirpath)
      if realpath in seen:
        self.log.debug('Already visited %s, skipping' % dirpath)
        dirnames[:] = []
        continue
      seen.add(realpath)
      for name in filenames:
        yield os.path.join(dirpath, name)

  def run(self):
    if not os.path.isdir(self.rrdDir):
      raise InvalidDirectory("'%s' is not a directory" % self.rrdDir)

    statistics = Statistics()
    visit = partial(visitFile, startTime=self.startTime,
                    singleMetric=self.singleMetric, log=self.log)

    if self.jobs > 1:
      pool = Pool(self.jobs)
      try:
        results = pool.imap_unordered(visit, self.files(), CHUNK_SIZE)
        for fileStats in results:
          if fileStats is not None:
            statistics.record(fileStats)
      finally:
        pool.close()
        pool.join()
    else:
      for path in self.files():
        fileStats = visit(path)
        if fileStats is not None:
          statistics.record(fileStats)

    return statistics


def analyze(rrdDir=DEFAULT_RRD_DIR, newerThan=DEFAULT_NEWER_THAN, singleMetric=False,
            jobs=1, log=log):
  """Walks rrdDir and returns its Statistics"""
  return Analyzer(rrdDir, newerThan, singleMetric, jobs, log).run()


def printSortedMap(data, out):
  for i, key in enumerate(sorted(data)):
    out.write(' %8d: %s (%d)\n' % (i + 1, key, data[key]))


def printStatistics(statistics, verbose=False, out=None):
  out = out or sys.stdout
  if verbose:
    out.write('\n')
    out.write('Nodes:\n')
    printSortedMap(statistics.nodes, out)
    out.write('IP Interfaces:\n')
    printSortedMap(statistics.interfaces, out)
    out.write('Resources:\n')
    printSortedMap(statistics.resources, out)
    out.write('\n')
  out.write('Number of Nodes = %d\n' % len(statistics.nodes))
  out.write('Number of IP Interfaces = %d\n' % len(statistics.interfaces))
  out.write('Number of OpenNMS Resources = %d\n' % len(statistics.resources))
  out.write('Number of Groups (Newts Resources) = %d\n' % statistics.groups)
  # Should match:
  # find <rrd-dir> -name strings.properties -exec cat {} \; | grep -v "^[#]" | wc -l
  out.write('Number of String Metrics = %d\n' % statistics.stringMetrics)
  # Should match when storeByGroup is enabled:
  # find <rrd-dir> -name ds.properties -exec cat {} \; | grep -v "^[#]" | wc -l
  out.write('Number of Numeric Metrics = %d\n' % statistics.numericMetrics)
  out.write('Total Size in Bytes = %s\n' % byteSize(statistics.totalSize))


def roundUp(value):
  return int(math.ceil(value))


def validateParameters(params):
  hasMetrics = params.totalMetrics > 0
  hasRate = params.injectionRate > 0
  if hasMetrics and hasRate:
    raise InvalidSizingParameters(
      "Total metrics (%s) and injection rate (%s) are mutually exclusive, "
      "please provide only one of them" % (params.totalMetrics, params.injectionRate))
  if not hasMetrics and not hasRate:
    raise InvalidSizingParameters("Either total metrics or injection rate must be positive")

  for field in ('diskSpace', 'ttl', 'interval', 'sampleSize', 'replicationFactor'):
    value = getattr(params, field)
    if not value > 0:
      raise InvalidSizingParameters("Invalid %s %s, must be positive" % (field, value))

  if not 0 <= params.overhead < 100:
    raise InvalidSizingParameters(
      "Invalid overhead %s, must be between 0 and 100" % params.overhead)


def estimate(params):
  """Calculates the number of Cassandra/ScyllaDB instances required

  params is a SizingParameters

  returns a SizingResult
  """
  validateParameters(params)

  step = params.interval * 60
  samplesPerMetric = (params.ttl * SECONDS_PER_DAY) / step

  if params.injectionRate > 0:
    injectionRate = params.injectionRate
    totalMetrics = injectionRate * step
  else:
    totalMetrics = params.totalMetrics
    injectionRate = totalMetrics / step

  availableBytesPerNode = params.diskSpace * GIGABYTE * (1 - params.overhead / 100.0)
  sampleCapacity = totalMetrics * samplesPerMetric
  clusterUsableBytes = sampleCapacity * params.sampleSize
  if not math.isfinite(availableBytesPerNode):
    raise InvalidSizingParameters(
      "Invalid disk space %s, the available bytes per instance overflow" % params.diskSpace)
  rawNodes = (clusterUsableBytes * params.replicationFactor) / availableBytesPerNode
  if not math.isfinite(rawNodes):
    raise InvalidSizingParameters(
      "The required cluster size overflows, please review the total metrics, "
      "injection rate, ttl and sample size")
  nodes = roundUp(rawNodes)
  if nodes < 1:
    raise InvalidSizingParameters(
      "The expected data is too small for %s GB per instance" % params.diskSpace)

  calculatedCapacity = (availableBytesPerNode * nodes) / \
      (samplesPerMetric * params.sampleSize * params.replicationFactor)
  dailyGrowthPerNode = totalMetrics * (params.replicationFactor / float(nodes)) * \
      (SECONDS_PER_DAY / step) * params.sampleSize / GIGABYTE

  return SizingResult(
    samplesPerMetric=samplesPerMetric,
    totalMetrics=totalMetrics,
    injectionRate=injectionRate,
    availableBytesPerNode=availableBytesPerNode,
    sampleCapacity=sampleCapacity,
    clusterUsableBytes=clusterUsableBytes,
    rawNodes=rawNodes,
    nodes=nodes,
    replicationFactorIsMinimum=nodes < params.replicationFactor,
    calculatedCapacity=calculatedCapacity,
    dailyGrowthPerNode=dailyGrowthPerNode,
  )


def printSizing(params, result, out=None):
  out = out or sys.stdout
  out.write('1 GB = %d Bytes\n' % GIGABYTE)
  out.write('The total samples per metric would be %d assuming %d bytes per sample '
            'with a replication factor of %d\n' %
            (result.samplesPerMetric, params.sampleSize, params.replicationFactor))
  out.write('The available disk space bytes per Cassandra instance would be %d bytes\n' %
            result.availableBytesPerNode)
  out.write('The expected sample injection rate would be around %d samples/sec '
            'persisting data every %dmin\n' % (result.injectionRate, params.interval))
  out.write('The total number of metrics would be %d\n' % result.totalMetrics)
  out.write('The recommended number of Cassandra instances would be %d\n' % result.nodes)
  if result.replicationFactorIsMinimum:
    out.write('The replication factor sets the minimum number of Cassandra instances '
              'to %d\n' % roundUp(params.replicationFactor))
  out.write('The calculated metrics capacity would be %d\n' % result.calculatedCapacity)
  out.write('The expected daily disk growth per Cassandra instance would be %.3f GB\n' %
            result.dailyGrowthPerNode)


# Keys accepted on each configuration file section, split into
# (valued options, boolean flags)
ConfigKeys = {
  'analysis': (('rrd_dir', 'newer_than', 'jobs'),
               ('single_metric', 'verbose', 'json')),
  'size': (('ttl', 'interval', 'sample_size', 'replication_factor', 'disk_overhead',
            'total_metrics', 'injection_rate', 'disk_space'),
           ('json',)),
}


def loadConfig(path, section):
  """Reads the defaults of a sub-command from an INI style file

  Values are returned as strings so argparse converts them like command
  line arguments; boolean flags are converted here.
  """
  if not os.path.isfile(path):
    raise InvalidConfiguration("Configuration file '%s' does not exist" % path)
  try:
    config = ConfigObj(path, list_values=False, file_error=True)
  except (ConfigObjError, IOError, OSError) as exc:
    raise InvalidConfiguration("Unable to parse '%s': %s" % (path, exc))

  if section not in config.sections:
    return {}

  options, flags = ConfigKeys[section]
  values = {}
  for key in config[section].scalars:
    if key in flags:
      try:
        values[key] = config[section].as_bool(key)
      except ValueError as exc:
        raise InvalidConfiguration("Invalid value for %s in '%s': %s" % (key, path, exc))
    elif key in options:
      values[key] = config[section][key]
    else:
      log.warning("Ignoring unknown option '%s' on [%s] in %s" % (key, section, path))
  return values


def setupLogging(debug=False, stream=None):
  """Logs to stdout, or to stream when the report itself owns stdout"""
  for handler in list(log.handlers):
    log.removeHandler(handler)
  handler = logging.StreamHandler(stream or sys.stdout)
  handler.setFormatter(logging.Formatter('%(asctime)s %(message)s'))
  log.addHandler(handler)
  log.setLevel(logging.DEBUG if debug else logging.INFO)
  log.propagate = False


def buildParser():
  """Returns the top level parser and the sub-command parsers by section"""
  parser = argparse.ArgumentParser(
    prog='newts-sizing',
    description='A CLI to help sizing a Cassandra/ScyllaDB cluster for Newts')
  parser.add_argument('--version', action='version', version='%(prog)s ' + __version__)
  parser.add_argument('--config', default=None, metavar='FILE',
                      help='INI file with defaults for the [analysis] and [size] sections')
  parser.add_argument('--debug', default=False, action='store_true',
                      help='Display debug information')
  subparsers = parser.add_subparsers(dest='command', metavar='COMMAND')
  subparsers.required = True

  analysis = subparsers.add_parser(
    'analysis', aliases=['a'],
    help='Analyses the RRD/JRB directory to produce estimates about total metrics '
         'similar to the Evaluation Layer')
  analysis.add_argument('-r', '--rrd-dir', default=DEFAULT_RRD_DIR,
                        help='The RRD/JRB directory (default: %(default)s)')
  analysis.add_argument('-n', '--newer-than', default=DEFAULT_NEWER_THAN, type=float,
                        metavar='HOURS',
                        help='Only process files newer than a given number of hours '
                             '(default: %(default)s)')
  analysis.add_argument('-s', '--single-metric', default=False, action='store_true',
                        help='Instruct the analyzer that storeByGroup is disabled')
  analysis.add_argument('-v', '--verbose', default=False, action='store_true',
                        help='Show every node, interface and resource found')
  analysis.add_argument('-j', '--jobs', default=1, type=int,
                        help='Number of worker processes (default: %(default)s)')
  analysis.add_argument('--json', default=False, action='store_true',
                        help='Output results in JSON form')
  analysis.set_defaults(section='analysis', func=runAnalysis)

  size = subparsers.add_parser(
    'size', aliases=['s'],
    help='Calculates the number of instances required for a Cassandra/ScyllaDB cluster')
  size.add_argument('-t', '--ttl', default=DEFAULT_TTL, type=float,
                    help='TTL, or total metric retention in days (default: %(default)s)')
  size.add_argument('-i', '--interval', default=DEFAULT_INTERVAL, type=float,
                    help='Average data collection interval in minutes (default: %(default)s)')
  size.add_argument('-s', '--sample-size', default=DEFAULT_SAMPLE_SIZE, type=float,
                    help='Average sample size in bytes; the size of a row from the '
                         'newts.samples table (default: %(default)s)')
  size.add_argument('-r', '--replication-factor', default=DEFAULT_REPLICATION_FACTOR,
                    type=float,
                    help='The desired replication factor (default: %(default)s)')
  size.add_argument('-o', '--disk-overhead', default=DEFAULT_OVERHEAD, type=float,
                    help='The percentage of disk space overhead per instance for '
                         'compactions (default: %(default)s)')
  size.add_argument('-m', '--total-metrics', default=0, type=float,
                    help='The expected total number of metrics to persist')
  size.add_argument('-R', '--injection-rate', default=0, type=float,
                    help='The expected sample injection rate in samples per second')
  size.add_argument('-d', '--disk-space', default=None, type=float,
                    help='The total disk space per instance in Gigabytes (required)')
  size.add_argument('--json', default=False, action='store_true',
                    help='Output results in JSON form')
  size.set_defaults(section='size', func=runSizing)

  return parser, {'analysis': analysis, 'size': size}


def runAnalysis(args, out):
  analyzer = Analyzer(args.rrd_dir, args.newer_than, args.single_metric, args.jobs, log)
  if not args.json:
    startDate = datetime.fromtimestamp(analyzer.startTime).astimezone()
    out.write('RRD Directory = %s\n' % args.rrd_dir)
    out.write('Assuming storeByGroup enabled ? %s\n' % str(not args.single_metric).lower())
    out.write('Checking files newer than %s\n' % startDate.strftime('%Y-%m-%d %H:%M:%S %Z'))
    out.write('...\n')

  try:
    statistics = analyzer.run()
  except InvalidDirectory as exc:
    raise SystemExit('[ERROR] %s' % str(exc))

  if args.json:
    out.write(json.dumps(statistics.asDict(), indent=2, separators=(',', ': '),
                         sort_keys=True))
    out.write('\n')
  else:
    printStatistics(statistics, args.verbose, out)


def runSizing(args, out):
  if args.disk_space is None:
    raise SystemExit('[ERROR] The disk space per instance (--disk-space) is required')

  params = SizingParameters(
    diskSpace=args.disk_space,
    totalMetrics=args.total_metrics,
    injectionRate=args.injection_rate,
    ttl=args.ttl,
    interval=args.interval,
    sampleSize=args.sample_size,
    replicationFactor=args.replication_factor,
    overhead=args.disk_overhead,
  )
  try:
    result = estimate(params)
  except InvalidSizingParameters as exc:
    raise SystemExit('[ERROR] %s' % str(exc))

  if args.json:
    out.write(json.dumps(result._asdict(), indent=2, separators=(',', ': ')))
    out.write('\n')
  else:
    printSizing(params, result, out)


def configureLogging(args):
  # JSON documents go to stdout, keep them parseable
  stream = sys.stderr if getattr(args, 'json', False) else None
  setupLogging(args.debug or getattr(args, 'verbose', False), stream)


def main(argv=None, out=None):
  out = out or sys.stdout
  parser, commands = buildParser()
  args = parser.parse_args(argv)
  configureLogging(args)

  if args.config:
    try:
      defaults = loadConfig(args.config, args.section)
    except InvalidConfiguration as exc:
      raise SystemExit('[ERROR] %s' % str(exc))
    commands[args.section].set_defaults(**defaults)
    args = parser.parse_args(argv)
    configureLogging(args)

  log.debug('Running %s with %s' % (args.section, vars(args)))

  args.func(args, out)
  return 0
