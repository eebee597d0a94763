from enum import Flag


class Compliant(Flag):
    '''It indicates which degree of compliantness the data must reflect the format'''
    NONE   = 0
    STRICT = 1 << 0  # unknown and duplicated children are errors
