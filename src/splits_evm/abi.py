"""
Contract ABIs for waterfall modules and pass-through wallets.

Derived from WaterfallModuleFactory.sol, WaterfallModule.sol,
PassThroughWalletFactory.sol and PassThroughWallet.sol.
"""

# WaterfallModuleFactory ABI
WATERFALL_FACTORY_ABI = [
    {
        "type": "function",
        "name": "createWaterfallModule",
        "inputs": [
            {"name": "token", "type": "address"},
            {"name": "nonWaterfallRecipient", "type": "address"},
            {"name": "recipients", "type": "address[]"},
            {"name": "thresholds", "type": "uint256[]"},
        ],
        "outputs": [{"name": "wm", "type": "address"}],
        "stateMutability": "nonpayable",
    },
    {
        "type": "function",
        "name": "wmImpl",
        "inputs": [],
        "outputs": [{"type": "address"}],
        "stateMutability": "view",
    },
    {
        "type": "event",
        "name": "CreateWaterfallModule",
        "anonymous": False,
        "inputs": [
            {"name": "waterfallModule", "type": "address", "indexed": True},
            {"name": "token", "type": "address", "indexed": False},
            {"name": "nonWaterfallRecipient", "type": "address", "indexed": False},
            {"name": "recipients", "type": "address[]", "indexed": False},
            {"name": "thresholds", "type": "uint256[]", "indexed": False},
        ],
    },
]

# WaterfallModule ABI
WATERFALL_MODULE_ABI = [
    # Read functions
    {
        "type": "function",
        "name": "distributedFunds",
        "inputs": [],
        "outputs": [{"type": "uint256"}],
        "stateMutability": "view",
    },
    {
        "type": "function",
        "name": "fundsPendingWithdrawal",
        "inputs": [],
        "outputs": [{"type": "uint256"}],
        "stateMutability": "view",
    },
    {
        "type": "function",
        "name": "getPullBalance",
        "inputs": [{"name": "account", "type": "address"}],
        "outputs": [{"type": "uint256"}],
        "stateMutability": "view",
    },
    {
        "type": "function",
        "name": "getTranches",
        "inputs": [],
        "outputs": [
            {"name": "recipients", "type": "address[]"},
            {"name": "thresholds", "type": "uint256[]"},
        ],
        "stateMutability": "view",
    },
    {
        "type": "function",
        "name": "nonWaterfallRecipient",
        "inputs": [],
        "outputs": [{"type": "address"}],
        "stateMutability": "view",
    },
    {
        "type": "function",
        "name": "token",
        "inputs": [],
        "outputs": [{"type": "address"}],
        "stateMutability": "view",
    },
    # Write functions
    {
        "type": "function",
        "name": "waterfallFunds",
        "inputs": [],
        "outputs": [],
        "stateMutability": "payable",
    },
    {
        "type": "function",
        "name": "waterfallFundsPull",
        "inputs": [],
        "outputs": [],
        "stateMutability": "payable",
    },
    {
        "type": "function",
        "name": "recoverNonWaterfallFunds",
        "inputs": [
            {"name": "nonWaterfallToken", "type": "address"},
            {"name": "recipient", "type": "address"},
        ],
        "outputs": [],
        "stateMutability": "payable",
    },
    {
        "type": "function",
        "name": "withdraw",
        "inputs": [{"name": "account", "type": "address"}],
        "outputs": [],
        "stateMutability": "nonpayable",
    },
    # Events
    {
        "type": "event",
        "name": "WaterfallFunds",
        "anonymous": False,
        "inputs": [
            {"name": "recipients", "type": "address[]", "indexed": False},
            {"name": "payouts", "type": "uint256[]", "indexed": False},
            {"name": "pullFlowFlag", "type": "uint256", "indexed": False},
        ],
    },
    {
        "type": "event",
        "name": "RecoverNonWaterfallFunds",
        "anonymous": False,
        "inputs": [
            {"name": "nonWaterfallToken", "type": "address", "indexed": False},
            {"name": "recipient", "type": "address", "indexed": False},
            {"name": "amount", "type": "uint256", "indexed": False},
        ],
    },
    {
        "type": "event",
        "name": "Withdrawal",
        "anonymous": False,
        "inputs": [
            {"name": "account", "type": "address", "indexed": False},
            {"name": "amount", "type": "uint256", "indexed": False},
        ],
    },
    {
        "type": "event",
        "name": "ReceiveETH",
        "anonymous": False,
        "inputs": [{"name": "amount", "type": "uint256", "indexed": False}],
    },
]

_PASS_THROUGH_WALLET_PARAMS = [
    {"name": "owner", "type": "address"},
    {"name": "paused", "type": "bool"},
    {"name": "passThrough", "type": "address"},
]

_CALL_COMPONENTS = [
    {"name": "to", "type": "address"},
    {"name": "value", "type": "uint256"},
    {"name": "data", "type": "bytes"},
]

# PassThroughWalletFactory ABI
PASS_THROUGH_WALLET_FACTORY_ABI = [
    {
        "type": "function",
        "name": "createPassThroughWallet",
        "inputs": [
            {
                "name": "params",
                "type": "tuple",
                "components": _PASS_THROUGH_WALLET_PARAMS,
            }
        ],
        "outputs": [{"name": "passThroughWallet", "type": "address"}],
        "stateMutability": "nonpayable",
    },
    {
        "type": "function",
        "name": "passThroughWalletImpl",
        "inputs": [],
        "outputs": [{"type": "address"}],
        "stateMutability": "view",
    },
    {
        "type": "event",
        "name": "CreatePassThroughWallet",
        "anonymous": False,
        "inputs": [
            {"name": "passThroughWallet", "type": "address", "indexed": True},
            {
                "name": "params",
                "type": "tuple",
                "indexed": False,
                "components": _PASS_THROUGH_WALLET_PARAMS,
            },
        ],
    },
]

# PassThroughWallet ABI
PASS_THROUGH_WALLET_ABI = [
    # Read functions
    {
        "type": "function",
        "name": "owner",
        "inputs": [],
        "outputs": [{"type": "address"}],
        "stateMutability": "view",
    },
    {
        "type": "function",
        "name": "paused",
        "inputs": [],
        "outputs": [{"type": "bool"}],
        "stateMutability": "view",
    },
    {
        "type": "function",
        "name": "passThrough",
        "inputs": [],
        "outputs": [{"type": "address"}],
        "stateMutability": "view",
    },
    # Write functions
    {
        "type": "function",
        "name": "passThroughTokens",
        "inputs": [{"name": "tokens", "type": "address[]"}],
        "outputs": [{"name": "amounts", "type": "uint256[]"}],
        "stateMutability": "nonpayable",
    },
    {
        "type": "function",
        "name": "setPassThrough",
        "inputs": [{"name": "passThrough_", "type": "address"}],
        "outputs": [],
        "stateMutability": "nonpayable",
    },
    {
        "type": "function",
        "name": "setPaused",
        "inputs": [{"name": "paused_", "type": "bool"}],
        "outputs": [],
        "stateMutability": "nonpayable",
    },
    {
        "type": "function",
        "name": "execCalls",
        "inputs": [
            {"name": "calls_", "type": "tuple[]", "components": _CALL_COMPONENTS},
        ],
        "outputs": [
            {"name": "blockNumber", "type": "uint256"},
            {"name": "returnData", "type": "bytes[]"},
        ],
        "stateMutability": "payable",
    },
    # Events
    {
        "type": "event",
        "name": "PassThrough",
        "anonymous": False,
        "inputs": [
            {"name": "passThrough", "type": "address", "indexed": True},
            {"name": "tokens", "type": "address[]", "indexed": False},
            {"name": "amounts", "type": "uint256[]", "indexed": False},
        ],
    },
    {
        "type": "event",
        "name": "SetPassThrough",
        "anonymous": False,
        "inputs": [{"name": "passThrough", "type": "address", "indexed": False}],
    },
    {
        "type": "event",
        "name": "SetPaused",
        "anonymous": False,
        "inputs": [{"name": "paused", "type": "bool", "indexed": False}],
    },
    {
        "type": "event",
        "name": "ExecCalls",
        "anonymous": False,
        "inputs": [
            {
                "name": "calls",
                "type": "tuple[]",
                "indexed": False,
                "components": _CALL_COMPONENTS,
            },
        ],
    },
    {
        "type": "event",
        "name": "OwnershipTransferred",
        "anonymous": False,
        "inputs": [
            {"name": "oldOwner", "type": "address", "indexed": True},
            {"name": "newOwner", "type": "address", "indexed": True},
        ],
    },
]

# ERC20 ABI (minimal for tranche size conversion)
ERC20_ABI = [
    {
        "type": "function",
        "name": "decimals",
        "inputs": [],
        "outputs": [{"type": "uint8"}],
        "stateMutability": "view",
    },
]
