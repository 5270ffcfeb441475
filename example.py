import http.client

import netblocker
from netblocker import NetworkBlocked, network_blocker


@network_blocker()
def make_request() -> None:
    conn = http.client.HTTPConnection("www.example.com", 80)
    try:
        conn.request("GET", "/")
    except NetworkBlocked as e:
        print(f"blocked: {e.host}:{e.port}")


make_request()

with network_blocker(allow_hosts=["example.com"]):
    netblocker.block_host("example.com")
    try:
        http.client.HTTPConnection("example.com", 80).request("GET", "/")
    except NetworkBlocked as e:
        print(f"blocked again after block_host: {e.host}")
