"""Blog — the smallest useful perch app.

Demonstrates regex routes with captures, HEAD served by GET routes,
async handlers reading the request body, per-exchange logging through
``perch.log``, and the failure boundary: ``/post/0`` raises, the client
gets a 500, and the next request is served as usual.

Run:
    python app.py
    perch run app:app --port 8080 --log-level debug
"""

from perch import App, deferred, log

app = App()

POSTS = {
    "1": "Hello, perch",
    "2": "Regex routes, first match wins",
}


@app.get("^/$")
def index(ctx, args):
    ctx.ok("".join(f'<a href="/post/{post_id}">{title}</a>\n' for post_id, title in POSTS.items()))


@app.get(r"/post/(\d+)")
def show_post(ctx, args):
    if args[0] == "0":
        raise LookupError("post 0 does not exist")
    log.debug(deferred("showing post %s of %d", args[0], len(POSTS)))
    ctx.ok("post:" + args[0])


@app.post("^/post$")
async def create_post(ctx, args):
    body = await ctx.body()
    ctx.content_type = "text/plain; charset=utf-8"
    ctx.set_header("Location", f"/post/{len(POSTS) + 1}")
    ctx.reply(201, body)


@app.delete(r"^/post/(\d+)$")
def delete_post(ctx, args):
    ctx.reply(204)


if __name__ == "__main__":
    app.run()
