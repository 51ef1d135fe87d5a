"""Local lookup table of common function selectors.

Avoids directory lookups for frequently encountered selectors, and pins the
signature used for selectors whose directory entries collide. The signature
resolver falls through to the 4byte directories only for selectors not found here.
"""

# selector -> function signature
KNOWN_SELECTORS: dict[str, str] = {
    # ERC20
    "0xa9059cbb": "transfer(address,uint256)",
    "0x095ea7b3": "approve(address,uint256)",
    "0x23b872dd": "transferFrom(address,address,uint256)",
    # WETH
    "0xd0e30db0": "deposit()",
    "0x2e1a7d4d": "withdraw(uint256)",
    # Access control
    "0x2f2ff15d": "grantRole(bytes32,address)",
    "0xd547741f": "revokeRole(bytes32,address)",
    # Ownable / Pausable
    "0xf2fde38b": "transferOwnership(address)",
    "0x8456cb59": "pause()",
    "0x3f4ba83a": "unpause()",
    # Proxy / upgrades
    "0x3659cfe6": "upgradeTo(address)",
    "0x4f1ef286": "upgradeToAndCall(address,bytes)",
    # TimelockController
    "0x01d5062a": "schedule(address,uint256,bytes,bytes32,bytes32,uint256)",
    "0x8f2a0bb0": "scheduleBatch(address[],uint256[],bytes[],bytes32,bytes32,uint256)",
    "0x134008d3": "execute(address,uint256,bytes,bytes32,bytes32)",
    "0xe38335e5": "executeBatch(address[],uint256[],bytes[],bytes32,bytes32)",
    # Safe
    "0x6a761202": "execTransaction(address,uint256,bytes,uint8,uint256,uint256,uint256,address,address,bytes)",
    "0x468721a7": "execTransactionFromModule(address,uint256,bytes,uint8)",
    "0x934f3a11": "checkSignatures(bytes32,bytes,bytes)",
    "0x0d582f13": "addOwnerWithThreshold(address,uint256)",
    "0x694e80c3": "changeThreshold(uint256)",
    "0x610b5925": "enableModule(address)",
    "0xe19a9dd9": "setGuard(address)",
    "0x8d80ff0a": "multiSend(bytes)",
    # Multicall
    "0x252dba42": "aggregate((address,bytes)[])",
    "0x82ad56cb": "aggregate3((address,bool,bytes)[])",
    "0xac9650d8": "multicall(bytes[])",
    "0x5ae401dc": "multicall(uint256,bytes[])",
    # Uniswap Universal Router
    "0x3593564c": "execute(bytes,bytes[],uint256)",
    "0x24856bc3": "execute(bytes,bytes[])",
    # zkSync L1Messenger and the governance message it carries
    "0x62f84b24": "sendToL1(bytes)",
    "0xa1dcb9b8": "execute(((address,uint256,bytes)[],address,bytes32))",
}
