ERRORS = {
  "E_AMIIBO": "Tag processing failed",
  "E_KEYS": "Master key material missing or corrupt",
  "E_INPUT": "Malformed UID or amiibo ID",
  "E_IO": "File missing or unreadable",
  "E_FORMAT": "Not a valid Flipper NFC file",
  "E_SIZE": "Tag image is not 540 bytes",
  "E_HMAC": "Invalid HMAC or corrupted data",
  "E_ORACLE": "Tag transform failed",
  "E_POSITION8": "Position 8 does not match XOR of bytes 4-7",
  "E_PWD": "Password does not match UID",
  "E_PACK": "PACK is not 80 80",
}
