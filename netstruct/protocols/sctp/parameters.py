"""
Variable-length parameters of the INIT and INIT ACK chunks (RFC 4960 3.3.2.1)
and the causes of the ERROR and ABORT chunks (RFC 4960 3.3.10).
"""
from enum import IntEnum

from ... import fields
from ...dispatch import TypeRegistry
from ...tlv import AbstractTLV, Padded32
from ..ip import IPv4AddrField


class ParameterType(IntEnum):
    IPv4               = 5
    IPv6               = 6
    StateCookie        = 7
    Unrecognized       = 8
    CookiePreservative = 9
    Hostname           = 11
    SupportedAddrTypes = 12
    ECN                = 32768


class HeartbeatInfoType(IntEnum):
    HeartbeatInfo = 1


class ErrorCauseType(IntEnum):
    InvalidStreamId                  = 1
    MissingMandatoryParameter        = 2
    StaleCookie                      = 3
    OutOfResource                    = 4
    UnresolvableAddress              = 5
    UnrecognizedChunkType            = 6
    InvalidMandatoryParameter        = 7
    UnrecognizedParameters           = 8
    NoUserData                       = 9
    CookieReceivedWhileShuttingDown  = 10
    RestartAssociationWithNewAddress = 11
    UserInitiatedAbort               = 12
    ProtocolViolation                = 13


class Parameter(Padded32, AbstractTLV.create('H', 'H', field_in_length='TLV', enum=ParameterType)):
    '''Generic parameter, used also for the ones of unknown type.'''

    def to_human(self):
        return '<%s>' % super().to_human()


PARAMETERS = TypeRegistry(key='type', default=Parameter)

IPv4Parameter = PARAMETERS.register(
    ParameterType.IPv4,
    Parameter.derive('IPv4Parameter', type_default='IPv4', value_field=IPv4AddrField()))
IPv6Parameter = PARAMETERS.register(
    ParameterType.IPv6,
    Parameter.derive('IPv6Parameter', type_default='IPv6', value_field=fields.StringField(16)))
StateCookieParameter = PARAMETERS.register(
    ParameterType.StateCookie,
    Parameter.derive('StateCookieParameter', type_default='StateCookie'))
UnrecognizedParameter = PARAMETERS.register(
    ParameterType.Unrecognized,
    Parameter.derive('UnrecognizedParameter', type_default='Unrecognized', value_field=Parameter()))
CookiePreservativeParameter = PARAMETERS.register(
    ParameterType.CookiePreservative,
    Parameter.derive('CookiePreservativeParameter', type_default='CookiePreservative',
                     value_field=fields.StructField('I')))
HostnameParameter = PARAMETERS.register(
    ParameterType.Hostname,
    Parameter.derive('HostnameParameter', type_default='Hostname', value_field=fields.CStringField()))
SupportedAddrTypesParameter = PARAMETERS.register(
    ParameterType.SupportedAddrTypes,
    Parameter.derive('SupportedAddrTypesParameter', type_default='SupportedAddrTypes',
                     value_field=fields.ArrayField(fields.StructField('H', enum=ParameterType))))
ECNParameter = PARAMETERS.register(
    ParameterType.ECN,
    Parameter.derive('ECNParameter', type_default='ECN'))

HeartbeatInfoParameter = Parameter.derive(
    'HeartbeatInfoParameter', type_default='HeartbeatInfo', enum=HeartbeatInfoType)


class ErrorCause(Padded32, AbstractTLV.create('H', 'H', field_in_length='TLV', enum=ErrorCauseType)):
    pass


ERROR_CAUSES = TypeRegistry(key='type', default=ErrorCause)

InvalidStreamIdError = ERROR_CAUSES.register(
    ErrorCauseType.InvalidStreamId,
    ErrorCause.derive('InvalidStreamIdError', type_default='InvalidStreamId',
                      value_field=fields.BitField('I', [('stream_id', 16), ('_', 16)])))
MissingMandatoryParameterError = ERROR_CAUSES.register(
    ErrorCauseType.MissingMandatoryParameter,
    ErrorCause.derive('MissingMandatoryParameterError', type_default='MissingMandatoryParameter',
                      value_field=fields.ArrayField(fields.StructField('H', enum=ParameterType))))
StaleCookieError = ERROR_CAUSES.register(
    ErrorCauseType.StaleCookie,
    ErrorCause.derive('StaleCookieError', type_default='StaleCookie', value_field=fields.StructField('I')))
OutOfResourceError = ERROR_CAUSES.register(
    ErrorCauseType.OutOfResource,
    ErrorCause.derive('OutOfResourceError', type_default='OutOfResource'))
UnresolvableAddressError = ERROR_CAUSES.register(
    ErrorCauseType.UnresolvableAddress,
    ErrorCause.derive('UnresolvableAddressError', type_default='UnresolvableAddress', value_field=Parameter()))
UserInitiatedAbortError = ERROR_CAUSES.register(
    ErrorCauseType.UserInitiatedAbort,
    ErrorCause.derive('UserInitiatedAbortError', type_default='UserInitiatedAbort'))
