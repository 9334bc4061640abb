
__author__    = "RADICAL-GridGate Development Team"
__copyright__ = "Copyright 2024, RADICAL"
__license__   = "MIT"


""" Exception classes
"""

import sys
import traceback


# ------------------------------------------------------------------------------
#
class GridGateException(Exception):
    """
    The Exception class encapsulates information about error conditions
    encountered while brokering jobs.

    Additionally to the error message (`e.message`), the exception also
    provides a trace to the code location where the error condition got raised
    (`e.traceback`).  If the exception is raised in reaction to another
    exception (the `parent`), the parent's type and message are appended to the
    message, and the parent's traceback is kept.

    Example::

      try:
          descr = await broker.handle_request(request)

      except rgg.DenialError as de:
          # policy rejection, tell the client why
          return de.as_dict()

      except rgg.GridGateException as e:
          # something else went wrong
          print('request failed: %s\n%s' % (e, e.traceback))
    """

    # --------------------------------------------------------------------------
    #
    def __init__(self, msg, parent=None):

        Exception.__init__(self, msg)

        self._plain_message = msg
        self._parent        = parent
        self._stype         = type(self).__name__

        if parent is None:
            stack           = traceback.extract_stack()
            self._traceback = ''.join(traceback.format_list(stack)[:-1])
            self._message   = msg

        elif isinstance(parent, GridGateException):
            self._traceback = parent.traceback
            self._message   = '%s\n  %-20s: %s' % (msg, parent.type,
                                                   parent.message)

        else:
            trace           = sys.exc_info()[2]
            stack           = traceback.extract_tb(trace)
            self._traceback = ''.join(traceback.format_list(stack))
            self._message   = '%s\n  %-20s: %s' % (msg, type(parent).__name__,
                                                   parent)


    # --------------------------------------------------------------------------
    #
    def __str__(self):
        return self._message


    # --------------------------------------------------------------------------
    #
    @classmethod
    def _log(cls, logger, msg, parent=None, level='error', **kwargs):
        '''
        log the exception message while constructing the exception, like::

          # raise an exception, log as error event (error level is default)
          raise rgg.BadParameter._log(self._log, 'empty session name')

          # raise an exception, log as warning event
          raise rgg.ConfigError._log(self._log, 'cannot parse', level='warning')

        This way, the 'raise' remains clearly in the code, as that is the
        dominating semantics of the call.
        '''

        log_method = getattr(logger, level.lower(), logger.error)
        log_method('%s: %s' % (cls.__name__, msg))

        return cls(msg, parent=parent, **kwargs)


    # --------------------------------------------------------------------------
    #
    def get_message(self):
        return self._message

    def get_plain_message(self):
        return self._plain_message

    def get_type(self):
        return self._stype

    def get_parent(self):
        return self._parent

    def get_traceback(self):
        return self._traceback

    message   = property(get_message)        # string
    type      = property(get_type)           # exception type
    parent    = property(get_parent)         # Exception
    traceback = property(get_traceback)      # string


# ------------------------------------------------------------------------------
#
class DenialError(GridGateException):
    """ A request was rejected by the admission policy.  `reason` names the
        rejecting rule."""

    def __init__(self, msg, parent=None, reason=None):

        GridGateException.__init__(self, msg, parent)

        self.reason = reason or msg


    def as_dict(self):
        return {'status'     : False,
                'description': self.reason}


# ------------------------------------------------------------------------------
#
class ValidationError(GridGateException):
    """ A job template or its parameters are not acceptable.  Raised before
        any grid engine command runs."""


# ------------------------------------------------------------------------------
#
class BadParameter(ValidationError):
    """ A given parameter is out of bound or ill formatted."""


# ------------------------------------------------------------------------------
#
class UnsupportedAttribute(ValidationError):
    """ The native specification uses a flag the broker does not pass on."""


# ------------------------------------------------------------------------------
#
class InvalidArrayBounds(ValidationError):
    """ The start / end / increment triple of an array job is invalid."""


# ------------------------------------------------------------------------------
#
class BackendUnavailable(GridGateException):
    """ The grid engine is not (or not yet) reachable."""


# ------------------------------------------------------------------------------
#
class GridEngineError(GridGateException):
    """ A grid engine command exited with a non-zero return code."""

    def __init__(self, msg, parent=None, returncode=None, stdout=None,
                       stderr=None):

        GridGateException.__init__(self, msg, parent)

        self.returncode = returncode
        self.stdout     = stdout
        self.stderr     = stderr


# ------------------------------------------------------------------------------
#
class ParseError(GridGateException):
    """ Grid engine output did not have the expected shape."""


# ------------------------------------------------------------------------------
#
class ConfigError(GridGateException):
    """ The configuration file could not be read or is invalid."""


# ------------------------------------------------------------------------------
#
class ListFileError(GridGateException):
    """ A white- / blacklist file could not be read or is invalid."""


# ------------------------------------------------------------------------------
#
class AlreadyExists(GridGateException):
    """ The entity to be created already exists."""


# ------------------------------------------------------------------------------
#
class DoesNotExist(GridGateException):
    """ An operation tried to access a non-existing entity."""


# ------------------------------------------------------------------------------
#
class Timeout(GridGateException):
    """ A wait operation did not complete in time."""


# ------------------------------------------------------------------------------

