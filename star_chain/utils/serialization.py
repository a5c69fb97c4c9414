"""
StarChain - Serialization Utilities
=====================================
Encoding canonico per payload blocchi e preimage hash.

Il formato è congelato: ordine campi, separatori e rappresentazione
numerica determinano l'hash di ogni blocco.
"""

import json
from typing import Any, Optional

from star_chain.constants import CANONICAL_JSON_SEPARATORS, HASH_FIELD_ORDER
from star_chain.errors import DecodeError
from star_chain.logging_setup import get_logger

logger = get_logger("utils.serialization")


# ============================================================================
# PAYLOAD ENCODING
# ============================================================================

def _check_json_value(value: Any, path: str = "$") -> None:
    """
    Ammette solo valori JSON che si decodificano identici. Chiavi non str
    e tuple, che json.dumps convertirebbe in silenzio, sono rifiutate.

    Raises:
        TypeError: Primo valore non ammesso, con il suo path
    """
    if value is None or isinstance(value, (str, bool, int, float)):
        return

    if isinstance(value, list):
        for index, item in enumerate(value):
            _check_json_value(item, f"{path}[{index}]")
        return

    if isinstance(value, dict):
        for key, item in value.items():
            if not isinstance(key, str):
                raise TypeError(
                    f"Payload object keys must be str, got {type(key).__name__} at {path}"
                )
            _check_json_value(item, f"{path}.{key}")
        return

    raise TypeError(f"Payload value of type {type(value).__name__} not allowed at {path}")


def encode_payload(payload: Any) -> str:
    """
    Encode payload in hex del JSON compatto UTF-8.

    Args:
        payload: Valore JSON (dict con chiavi str, list, str, numeri, bool, None)

    Returns:
        str: Hex string lowercase

    Raises:
        TypeError: Tipo non JSON, chiave non str o tuple. Il payload deve
            decodificarsi identico, quindi le conversioni implicite di
            json.dumps non sono ammesse
        ValueError: NaN o infinito

    Examples:
        >>> encode_payload({"data": "Genesis Block"})
        '7b2264617461223a2247656e6573697320426c6f636b227d'
    """
    _check_json_value(payload)

    text = json.dumps(
        payload,
        separators=CANONICAL_JSON_SEPARATORS,
        ensure_ascii=False,
        allow_nan=False,
    )
    return text.encode('utf-8').hex()


def decode_payload(encoded: str) -> Any:
    """
    Decode payload hex → valore originale.

    Args:
        encoded: Hex string prodotta da encode_payload

    Returns:
        Any: Valore decodificato

    Raises:
        DecodeError: Hex, UTF-8 o JSON non validi
    """
    if not isinstance(encoded, str):
        raise DecodeError(
            f"Encoded payload must be str, got {type(encoded).__name__}",
            code="PAYLOAD_TYPE"
        )

    try:
        raw = bytes.fromhex(encoded)
    except ValueError as e:
        raise DecodeError(f"Invalid payload hex: {e}", code="PAYLOAD_HEX")

    try:
        text = raw.decode('utf-8')
    except UnicodeDecodeError as e:
        raise DecodeError(f"Invalid payload UTF-8: {e}", code="PAYLOAD_UTF8")

    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        logger.debug("Payload JSON decode failed", extra_data={"error": str(e)})
        raise DecodeError(f"Invalid payload JSON: {e}", code="PAYLOAD_JSON")


# ============================================================================
# HASH PREIMAGE
# ============================================================================

def canonical_block_preimage(
    data: str,
    previous_hash: Optional[str],
    height: int,
    time: int
) -> bytes:
    """
    Serializzazione canonica dei campi hashati di un blocco.

    Ordine fisso HASH_FIELD_ORDER: data, previousBlockHash, height, time.

    Examples:
        >>> canonical_block_preimage("7b7d", None, 0, 1700000000)
        b'{"data":"7b7d","previousBlockHash":null,"height":0,"time":1700000000}'
    """
    values = (data, previous_hash, int(height), int(time))
    document = dict(zip(HASH_FIELD_ORDER, values))
    return json.dumps(
        document,
        separators=CANONICAL_JSON_SEPARATORS,
        ensure_ascii=True,
    ).encode('utf-8')


__all__ = [
    "encode_payload",
    "decode_payload",
    "canonical_block_preimage",
]
