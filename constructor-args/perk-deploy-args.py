# AkemonaERC20Perk constructor arguments, in declaration order
constructor_args = [
    "TOKENTEST",
    "SYMB",
    1000000000000,
    100000000,
    "0x6B9a53d301b62441c30f56b887f1f7b8C191ac0a",
    "0x18e841104b12D887D20499302b19454b4F43154A",
]
