"""
Widevine PSSH Data (a.k.a. WidevineCencHeader) protobuf schema.

Equivalent to:

    syntax = "proto2";
    package pypssh;

    message WidevinePsshData {
      enum Algorithm {
        UNENCRYPTED = 0;
        AESCTR = 1;
      };
      optional Algorithm algorithm = 1;
      repeated bytes key_id = 2;
      optional string provider = 3;
      optional bytes content_id = 4;
      optional string track_type = 5;
      optional int32 protection_scheme = 9;
    }

The descriptor is built once, in its own pool, when this module is imported.
"""
from google.protobuf import descriptor_pb2, descriptor_pool, message_factory

PACKAGE = "pypssh"
MESSAGE_NAME = "WidevinePsshData"

_Field = descriptor_pb2.FieldDescriptorProto

_FIELDS = (
    # name, number, label, type
    ("algorithm", 1, _Field.LABEL_OPTIONAL, _Field.TYPE_ENUM),
    ("key_id", 2, _Field.LABEL_REPEATED, _Field.TYPE_BYTES),
    ("provider", 3, _Field.LABEL_OPTIONAL, _Field.TYPE_STRING),
    ("content_id", 4, _Field.LABEL_OPTIONAL, _Field.TYPE_BYTES),
    ("track_type", 5, _Field.LABEL_OPTIONAL, _Field.TYPE_STRING),
    ("protection_scheme", 9, _Field.LABEL_OPTIONAL, _Field.TYPE_INT32),
)


def _file_descriptor_proto():
    file_proto = descriptor_pb2.FileDescriptorProto(
        name="pypssh/widevine_pssh_data.proto",
        package=PACKAGE,
        syntax="proto2"
    )
    message = file_proto.message_type.add(name=MESSAGE_NAME)

    algorithm = message.enum_type.add(name="Algorithm")
    algorithm.value.add(name="UNENCRYPTED", number=0)
    algorithm.value.add(name="AESCTR", number=1)

    for name, number, label, type_ in _FIELDS:
        field = message.field.add(name=name, number=number, label=label, type=type_)
        if type_ == _Field.TYPE_ENUM:
            field.type_name = ".{0}.{1}.Algorithm".format(PACKAGE, MESSAGE_NAME)

    return file_proto


def _load():
    pool = descriptor_pool.DescriptorPool()
    pool.AddSerializedFile(_file_descriptor_proto().SerializeToString())
    descriptor = pool.FindMessageTypeByName("{0}.{1}".format(PACKAGE, MESSAGE_NAME))
    return message_factory.GetMessageClass(descriptor)


WidevinePsshData = _load()

UNENCRYPTED = 0
AESCTR = 1


__all__ = ("WidevinePsshData", "UNENCRYPTED", "AESCTR")
