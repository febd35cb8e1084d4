import threading

from chatwire.audio_queue import AudioPackage, AudioQueue


def test_package_from_bytes_takes_length():
    package = AudioPackage(b"\x01\x02\x03")
    assert package.length == 3
    assert package.index == 0
    assert package.data == bytearray(b"\x01\x02\x03")


def test_package_from_stream_copies_prefix():
    package = AudioPackage.from_stream(b"abcdef", 3)
    assert package.data == bytearray(b"abc")
    assert package.length == 3
    assert package.index == 3


def test_append_advances_index():
    package = AudioPackage()
    package.append(7)
    package.append(9)
    assert package.data == bytearray([7, 9])
    assert package.index == 2


def test_queue_is_fifo():
    queue = AudioQueue()
    assert queue.empty() is True
    first, second = AudioPackage(b"a"), AudioPackage(b"b")
    queue.push(first)
    queue.push(second)
    assert queue.empty() is False
    assert queue.pop() is first
    assert queue.pop() is second
    assert queue.empty() is True


def test_pop_on_empty_returns_none():
    assert AudioQueue().pop() is None


def test_producer_consumer_threads_preserve_order():
    queue = AudioQueue()
    count = 500
    received = []

    def produce():
        for n in range(count):
            queue.push(AudioPackage(bytes([n % 256])))

    producer = threading.Thread(target=produce)
    producer.start()
    while len(received) < count:
        package = queue.pop()
        if package is not None:
            received.append(package.data[0])
    producer.join()
    assert received == [n % 256 for n in range(count)]
    assert queue.empty()