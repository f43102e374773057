import asyncio, json, websockets, sys

URI = "ws://127.0.0.1:8080/ws"

async def main(name: str):
    async with websockets.connect(URI) as ws:
        await ws.send(json.dumps({"type": "join", "name": name}))

        async def reader():
            while True:
                msg = await ws.recv()
                data = json.loads(msg)
                t = data.get("type")
                if t in ("start", "state"):
                    # one summary line per tick
                    swap = data.get("swap")
                    print(f"[{name}] t={data.get('t')} agent={data.get('agent')} "
                          f"path_len={len(data.get('path', []))} swap={swap}")
                else:
                    print(f"[{name}] << {data}")

        async def writer():
            mapping = {"w": "U", "s": "D", "a": "L", "d": "R"}
            while True:
                line = await asyncio.to_thread(input, f"[{name}] move (w/a/s/d), r = regenerate, t X Y = teleport: ")
                parts = line.strip().lower().split()
                if not parts:
                    continue
                key = parts[0]
                if key in mapping:
                    await ws.send(json.dumps({"type": "input", "dir": mapping[key]}))
                elif key == "r":
                    await ws.send(json.dumps({"type": "regenerate"}))
                elif key == "t" and len(parts) == 3:
                    await ws.send(json.dumps({"type": "teleport", "pos": [parts[1], parts[2]]}))

        await asyncio.gather(reader(), writer())

if __name__ == "__main__":
    name = sys.argv[1] if len(sys.argv) > 1 else "P"
    asyncio.run(main(name))
