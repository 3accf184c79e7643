"""OSI model course content and the packet walkthrough data."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Tuple, Union


@dataclass(frozen=True)
class OSILayer:
    number: int
    name: str
    short_name: str
    description: str
    function: str
    protocols: Tuple[str, ...]
    analogy: str
    header_type: str
    cli_tools: Tuple[str, ...]
    external_doc: str
    examples: Tuple[str, ...]
    key_concepts: Tuple[str, ...]

    @property
    def title(self) -> str:
        return f"Layer {self.number}: {self.name}"


@dataclass(frozen=True)
class PacketLayer:
    """One decoded layer of the captured HTTP request."""

    osi_layer: int
    name: str
    headers: Tuple[Tuple[str, str], ...]
    raw_data: str
    explanation: str


# Top of the stack first, the way the layers are usually drawn.
OSI_LAYERS: Tuple[OSILayer, ...] = (
    OSILayer(
        number=7,
        name="Application Layer",
        short_name="Application",
        description=(
            "Provides network services directly to end-user applications. This is "
            "where human-computer interaction happens through network-aware applications."
        ),
        function="Interface between applications and the network",
        protocols=("HTTP", "HTTPS", "FTP", "SMTP", "POP3", "IMAP", "DNS", "DHCP", "SSH", "Telnet"),
        analogy="Like the post office window where you interact with postal services",
        header_type="Application-specific headers (HTTP headers, email headers)",
        cli_tools=("curl", "wget", "dig", "nslookup", "ssh", "telnet", "ftp"),
        external_doc="https://developer.mozilla.org/en-US/docs/Web/HTTP",
        examples=(
            "Web browsers sending HTTP requests",
            "Email clients using SMTP/IMAP",
            "File transfer with FTP/SFTP",
            "DNS resolution queries",
        ),
        key_concepts=(
            "User interface to network services",
            "Protocol-specific formatting",
            "Application data handling",
            "Service identification",
        ),
    ),
    OSILayer(
        number=6,
        name="Presentation Layer",
        short_name="Presentation",
        description=(
            "Handles data translation, encryption, compression, and formatting. "
            "Ensures data sent by one system can be read by another."
        ),
        function="Data translation, encryption, and compression",
        protocols=("SSL/TLS", "JPEG", "MPEG", "GIF", "PNG", "ASCII", "EBCDIC", "MIME"),
        analogy="Like a translator who converts between languages and encrypts messages",
        header_type="Encryption headers, compression metadata",
        cli_tools=("openssl", "gpg", "base64", "gzip", "tar"),
        external_doc="https://tools.ietf.org/html/rfc5246",
        examples=(
            "SSL/TLS encryption for HTTPS",
            "Image compression (JPEG, PNG)",
            "Video encoding (MPEG, H.264)",
            "Character encoding (UTF-8, ASCII)",
        ),
        key_concepts=(
            "Data encryption and decryption",
            "Compression and decompression",
            "Character set conversion",
            "Data format translation",
        ),
    ),
    OSILayer(
        number=5,
        name="Session Layer",
        short_name="Session",
        description=(
            "Manages sessions between applications. Establishes, maintains, "
            "synchronizes, and terminates communication sessions."
        ),
        function="Session establishment, management, and termination",
        protocols=("NetBIOS", "RPC", "PPTP", "L2TP", "SQL sessions", "NFS"),
        analogy="Like a meeting coordinator who schedules, manages, and ends meetings",
        header_type="Session management headers, checkpoint markers",
        cli_tools=("netstat", "ss", "rpcinfo", "showmount"),
        external_doc="https://tools.ietf.org/html/rfc1001",
        examples=(
            "Database connection sessions",
            "Web application login sessions",
            "Remote procedure calls (RPC)",
            "Network file system sessions",
        ),
        key_concepts=(
            "Session establishment",
            "Synchronization and checkpointing",
            "Session recovery",
            "Connection management",
        ),
    ),
    OSILayer(
        number=4,
        name="Transport Layer",
        short_name="Transport",
        description=(
            "Provides reliable data transfer services to upper layers. Handles "
            "error detection, flow control, and segmentation."
        ),
        function="End-to-end data delivery and error recovery",
        protocols=("TCP", "UDP", "SCTP", "SPX"),
        analogy="Like a delivery service that ensures packages arrive intact and in order",
        header_type="TCP/UDP headers with ports, sequence numbers, checksums",
        cli_tools=("netstat", "ss", "lsof", "tcpdump", "wireshark", "nmap"),
        external_doc="https://tools.ietf.org/html/rfc793",
        examples=(
            "TCP reliable web traffic (port 80, 443)",
            "UDP streaming media (DNS port 53)",
            "TCP file transfers (FTP port 21)",
            "UDP gaming traffic",
        ),
        key_concepts=(
            "Port numbers (0-65535)",
            "Reliable vs unreliable delivery",
            "Flow control and congestion control",
            "Segmentation and reassembly",
        ),
    ),
    OSILayer(
        number=3,
        name="Network Layer",
        short_name="Network",
        description=(
            "Handles routing of data packets between different networks. Determines "
            "the best path for data across multiple networks."
        ),
        function="Routing and logical addressing",
        protocols=("IP", "IPv6", "ICMP", "OSPF", "BGP", "RIP", "EIGRP"),
        analogy="Like a GPS system that finds the best route between addresses",
        header_type="IP headers with source/destination addresses, TTL",
        cli_tools=("ping", "traceroute", "route", "ip", "iptables", "mtr"),
        external_doc="https://tools.ietf.org/html/rfc791",
        examples=(
            "IP routing between networks",
            "ICMP ping and traceroute",
            "Router forwarding decisions",
            "Subnet communication",
        ),
        key_concepts=(
            "IP addresses (IPv4/IPv6)",
            "Routing tables and algorithms",
            "Subnetting and VLANs",
            "Packet forwarding",
        ),
    ),
    OSILayer(
        number=2,
        name="Data Link Layer",
        short_name="Data Link",
        description=(
            "Provides node-to-node data transfer and error detection/correction for "
            "the physical layer. Handles MAC addressing."
        ),
        function="Node-to-node delivery and error detection",
        protocols=("Ethernet", "Wi-Fi (802.11)", "PPP", "Frame Relay", "ATM"),
        analogy="Like addressing an envelope with the recipient's street address",
        header_type="Ethernet frames with MAC addresses, frame check sequence",
        cli_tools=("arp", "bridge", "brctl", "iwconfig", "ethtool"),
        external_doc="https://standards.ieee.org/standard/802_3-2018.html",
        examples=(
            "Ethernet frame transmission",
            "Wi-Fi wireless communication",
            "Switch forwarding decisions",
            "ARP address resolution",
        ),
        key_concepts=(
            "MAC addresses (48-bit hardware)",
            "Frame formatting and CRC",
            "Collision detection (CSMA/CD)",
            "Switch operation",
        ),
    ),
    OSILayer(
        number=1,
        name="Physical Layer",
        short_name="Physical",
        description=(
            "Defines the electrical, mechanical, and procedural interface to the "
            "physical transmission medium. Raw bit transmission."
        ),
        function="Physical transmission of raw bits",
        protocols=("Ethernet cables", "Fiber optic", "Wi-Fi radio", "Bluetooth", "USB"),
        analogy="Like the actual roads and vehicles that carry the mail",
        header_type="No headers - raw electrical/optical signals",
        cli_tools=("ethtool", "iwlist", "lshw", "dmesg", "lsusb"),
        external_doc="https://standards.ieee.org/standard/802_3-2018.html",
        examples=(
            "Copper wire electrical signals",
            "Fiber optic light pulses",
            "Radio frequency transmission",
            "Cable specifications (Cat5e, Cat6)",
        ),
        key_concepts=(
            "Electrical signal specifications",
            "Cable types and connectors",
            "Signal encoding and modulation",
            "Physical topology",
        ),
    ),
)

MNEMONICS: Tuple[str, ...] = (
    "Please Do Not Throw Sausage Pizza Away",
    "All People Seem To Need Data Processing",
    "Please Do Not Tell Secret Passwords Anywhere",
    "Please Do Not Touch Steve's Pet Alligator",
    "Physical Data Networking Transport Session Presentation Application",
)

# Letter of the first mnemonic, bottom layer first.
MNEMONIC_MAPPING: Tuple[Tuple[str, str, int], ...] = (
    ("P", "Physical", 1),
    ("D", "Data Link", 2),
    ("N", "Network", 3),
    ("T", "Transport", 4),
    ("S", "Session", 5),
    ("P", "Presentation", 6),
    ("A", "Application", 7),
)

KUBERNETES_CONTEXT: Dict[int, str] = {
    7: "Ingress controllers handle HTTP/HTTPS traffic routing and load balancing",
    6: "TLS termination at Ingress for HTTPS, cert-manager for certificate management",
    5: "Service sessions, connection pooling in service meshes like Istio",
    4: "Service ports, load balancing, kube-proxy manages port translation",
    3: "Pod IPs, Service IPs, cluster CIDR, CNI manages IP address allocation",
    2: "CNI plugins handle container network interfaces, bridge networks",
    1: "Node network interfaces, physical/virtual network infrastructure",
}

SAMPLE_PACKET_LAYERS: Tuple[PacketLayer, ...] = (
    PacketLayer(
        osi_layer=1,
        name="Physical Layer",
        headers=(
            ("Medium", "Ethernet over copper wire"),
            ("Encoding", "Manchester encoding"),
            ("Signal Level", "-2.5V to +2.5V"),
            ("Bit Rate", "1000 Mbps"),
        ),
        raw_data="10101010 10101010 10101010 10101010 10111011 ...",
        explanation=(
            "At the physical layer, data is transmitted as electrical signals over the "
            "network cable. This represents the raw bits being sent as voltage levels "
            "on the wire."
        ),
    ),
    PacketLayer(
        osi_layer=2,
        name="Data Link Layer (Ethernet)",
        headers=(
            ("Destination MAC", "02:42:ac:12:00:02"),
            ("Source MAC", "02:42:ac:12:00:01"),
            ("EtherType", "0x0800 (IPv4)"),
            ("Frame Length", "74 bytes"),
            ("FCS", "0x12345678"),
        ),
        raw_data="02:42:ac:12:00:02 02:42:ac:12:00:01 08:00 45:00...",
        explanation=(
            "The Ethernet frame wraps the IP packet with MAC addresses for local network "
            "delivery. The source MAC is the sending container's interface, and the "
            "destination MAC is the nginx container's interface."
        ),
    ),
    PacketLayer(
        osi_layer=3,
        name="Network Layer (IP)",
        headers=(
            ("Version", "4 (IPv4)"),
            ("Header Length", "20 bytes"),
            ("Source IP", "10.244.0.5"),
            ("Destination IP", "10.244.0.10"),
            ("Protocol", "6 (TCP)"),
            ("TTL", "64"),
            ("Packet Length", "60 bytes"),
        ),
        raw_data="45:00:00:3c:00:00:40:00:40:06:b7:c8:0a:f4:00:05:0a:f4:00:0a",
        explanation=(
            "The IP header contains routing information to deliver the packet from the "
            "busybox Pod IP to the nginx Pod IP within the Kubernetes cluster network."
        ),
    ),
    PacketLayer(
        osi_layer=4,
        name="Transport Layer (TCP)",
        headers=(
            ("Source Port", "38472"),
            ("Destination Port", "80"),
            ("Sequence Number", "1234567890"),
            ("Ack Number", "0"),
            ("Flags", "SYN"),
            ("Window Size", "65535"),
            ("Checksum", "0x1234"),
        ),
        raw_data="96:38:00:50:49:96:02:d2:00:00:00:00:a0:02:ff:ff:12:34:00:00",
        explanation=(
            "The TCP header establishes a reliable connection to nginx on port 80. This "
            "is the SYN packet that starts the TCP three-way handshake for the HTTP "
            "connection."
        ),
    ),
    PacketLayer(
        osi_layer=7,
        name="Application Layer (HTTP)",
        headers=(
            ("Method", "GET"),
            ("URI", "/"),
            ("HTTP Version", "1.1"),
            ("Host", "nginx"),
            ("User-Agent", "curl/7.64.0"),
            ("Accept", "*/*"),
            ("Connection", "keep-alive"),
        ),
        raw_data="GET / HTTP/1.1\\r\\nHost: nginx\\r\\nUser-Agent: curl/7.64.0\\r\\nAccept: */*\\r\\n\\r\\n",
        explanation=(
            "The HTTP GET request from the busybox Pod to fetch the nginx welcome page. "
            "This is the application-layer data that users actually care about - a web "
            "request."
        ),
    ),
)


def layer_by_number(number: int) -> OSILayer | None:
    for layer in OSI_LAYERS:
        if layer.number == number:
            return layer
    return None


def load_packet_layers(artifact: Union[str, Path]) -> List[PacketLayer]:
    """Load the walkthrough layers for a finished lab.

    Capture files are not decoded; once the capture exists the bundled
    sample layers stand in for it. Returns an empty list when there is no
    capture yet.
    """
    if not Path(artifact).exists():
        return []
    return list(SAMPLE_PACKET_LAYERS)
