"""Evaluation context information for half precision arithmetic."""

from ..binary16.ops import RM


binary16_synonyms = {'binary16', 'float16', 'float16_t', 'half'}
binary32_synonyms = {'binary32', 'float32', 'float32_t', 'single', 'float'}
binary64_synonyms = {'binary64', 'float64', 'float64_t', 'double'}
binary80_synonyms = {'binary80', 'float80', 'extended', 'longdouble'}

RNE_synonyms = {'rne', 'nearesteven', 'roundnearesteven', 'nearesttiestoeven', 'roundnearesttiestoeven'}

true_synonyms = {'true', 'yes', 'on', '1'}
false_synonyms = {'false', 'no', 'off', '0'}

IEEE_rm = {}
IEEE_rm.update((k, RM.RNE) for k in RNE_synonyms)


def prop_to_bool(name, value):
    if isinstance(value, bool):
        return value
    s = str(value).lower()
    if s in true_synonyms:
        return True
    elif s in false_synonyms:
        return False
    else:
        raise ValueError('unsupported value for {}: {}'.format(name, repr(value)))


class EvalCtx(object):
    """Generic context holding properties."""

    props = {}

    def __init__(self, props=None):
        self.props = {}
        if props:
            self._update_props(props)

    def _update_props(self, props):
        self.props.update(props)

    def _import_fields(self, ctx):
        pass

    def __repr__(self):
        args = []
        if len(self.props) > 0:
            args.append('props=' + repr(self.props))
        return '{}({})'.format(type(self).__name__, ', '.join(args))

    def let(self, props=None):
        """Create a new context, updated with any provided properties."""
        cls = type(self)
        newctx = cls.__new__(cls)
        newctx._import_fields(self)

        if props:
            newctx.props = self.props.copy()
            newctx._update_props(props)
        else:
            # share the dictionary
            newctx.props = self.props

        return newctx


class HalfCtx(EvalCtx):
    """Context for binary16 arithmetic.

    Only round to nearest, ties to even is supported. The flush_subnormals
    flag models targets that treat subnormal encodings as zero; it affects
    canonicality, binade, next_up / next_down and the least nonzero
    magnitude, and nothing else.

    Properties use FPCore-style names:
    >>> HalfCtx(props={'flush-subnormals': 'true'}).flush_subnormals
    True
    """

    rm = RM.RNE
    flush_subnormals = False

    def __init__(self, props=None, rm=None, flush_subnormals=None):
        self.rm = self.rm
        self.flush_subnormals = self.flush_subnormals

        self.props = {}
        if props:
            self._update_props(props)

        # arguments are allowed to override properties
        if rm is not None:
            if rm != RM.RNE:
                raise ValueError('unsupported rounding mode {}'.format(repr(rm)))
            self.rm = rm
        if flush_subnormals is not None:
            self.flush_subnormals = bool(flush_subnormals)

    def _update_props(self, props):
        if 'round' in props:
            rounding = props['round']
            try:
                self.rm = IEEE_rm[str(rounding).lower()]
            except KeyError:
                raise ValueError('unsupported rounding mode {}'.format(repr(rounding)))

        if 'flush-subnormals' in props:
            self.flush_subnormals = prop_to_bool('flush-subnormals', props['flush-subnormals'])

        self.props.update(props)

    def _import_fields(self, ctx):
        self.rm = ctx.rm
        self.flush_subnormals = ctx.flush_subnormals

    def __eq__(self, other):
        if isinstance(other, HalfCtx):
            return self.rm == other.rm and self.flush_subnormals == other.flush_subnormals
        return NotImplemented

    def __hash__(self):
        return hash((self.rm, self.flush_subnormals))

    def __repr__(self):
        args = []
        if len(self.props) > 0:
            args.append('props=' + repr(self.props))
        args += ['rm=' + str(self.rm), 'flush_subnormals=' + repr(self.flush_subnormals)]
        return '{}({})'.format(type(self).__name__, ', '.join(args))


DEFAULT_CTX = HalfCtx()
FLUSH_CTX = HalfCtx(flush_subnormals=True)
