from .binary16 import utils, ops, codec, gmpmath
from .arithmetic import evalctx, conversion, half

Half = half.Half
Sign = half.Sign
RoundingRule = half.RoundingRule
HalfCtx = evalctx.HalfCtx
DEFAULT_CTX = evalctx.DEFAULT_CTX
FLUSH_CTX = evalctx.FLUSH_CTX
FloatClass = codec.FloatClass
SourceKind = conversion.SourceKind

HalfError = utils.HalfError
PreconditionError = utils.PreconditionError
ConversionError = utils.ConversionError
